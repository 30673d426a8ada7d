"""Registration, login and profile lookup."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classconnect.config import Settings
from classconnect.errors import BadRequest, NotFound
from classconnect.models import User, UserRole
from classconnect.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserOut
from classconnect.security import Identity, hash_password, issue_token, verify_password


logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    def get_user_by_email(self, email: str) -> User | None:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def _token_response(self, user: User) -> TokenResponse:
        return TokenResponse(
            token=issue_token(user, settings=self.settings),
            user=UserOut.model_validate(user),
        )

    def register(self, data: RegisterRequest) -> TokenResponse:
        if self.get_user_by_email(data.email):
            raise BadRequest("A user with this email already exists", code="USER_EXISTS")

        user = User(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=UserRole(data.role),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Concurrent registration with the same email.
            self.db.rollback()
            raise BadRequest("A user with this email already exists", code="USER_EXISTS") from exc
        self.db.refresh(user)
        logger.info("Registered %s %s", user.role.value, user.id)
        return self._token_response(user)

    def login(self, data: LoginRequest) -> TokenResponse:
        user = self.get_user_by_email(data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise BadRequest("Invalid credentials", code="INVALID_CREDENTIALS")
        return self._token_response(user)

    def me(self, identity: Identity) -> UserOut:
        user = self.db.get(User, identity.id)
        if user is None:
            raise NotFound("User not found", code="NOT_FOUND")
        return UserOut.model_validate(user)
