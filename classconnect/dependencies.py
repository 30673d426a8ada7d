"""FastAPI dependencies: settings, session, storage and the auth gate."""

import logging
from collections.abc import Iterator
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classconnect.config import Settings
from classconnect.errors import Forbidden, Unauthorized
from classconnect.models import User, UserRole
from classconnect.security import Identity, InvalidToken, verify
from classconnect.storage import FileStorage


logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, always closed."""

    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_identity(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> Identity:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    A missing token is ``UNAUTHORIZED``; a token that fails verification is
    ``INVALID_TOKEN``. The follow-up lookup of the user row is advisory only:
    if the row is gone or the lookup fails the request still proceeds with
    the identity carried by the token.
    """

    if not authorization:
        raise Unauthorized("No token provided, authorization denied", code="UNAUTHORIZED")
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthorized("Token is not valid", code="INVALID_TOKEN")
    try:
        identity = verify(token, settings=settings)
    except InvalidToken as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise Unauthorized("Token is not valid", code="INVALID_TOKEN") from exc

    try:
        if db.get(User, identity.id) is None:
            logger.warning("Token subject %s has no user row; continuing", identity.id)
    except SQLAlchemyError as exc:
        logger.warning("User existence check failed for %s: %s", identity.id, exc)
    return identity


def ensure_role(identity: Identity, role: UserRole, message: Optional[str] = None) -> None:
    if identity.role != role:
        raise Forbidden(
            message or f"This action is only available to {role.value}s", code="UNAUTHORIZED_ROLE"
        )


def require_role(role: UserRole, message: Optional[str] = None):
    """Dependency factory: the caller must hold ``role``."""

    def _require(identity: Identity = Depends(get_current_identity)) -> Identity:
        ensure_role(identity, role, message)
        return identity

    return _require

