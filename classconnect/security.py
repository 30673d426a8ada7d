"""Password hashing and bearer token signing."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from classconnect.config import Settings, get_settings
from classconnect.models import UserRole


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class InvalidToken(Exception):
    """Token is malformed, expired, or signed with another key."""


class Identity(BaseModel):
    """Authenticated caller decoded from a token."""

    id: str
    name: str
    email: str
    role: UserRole


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def sign(payload: dict[str, Any], ttl: Optional[timedelta] = None, settings: Optional[Settings] = None) -> str:
    """Sign ``payload`` into a token that expires after ``ttl``."""

    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    claims = dict(payload)
    claims["iat"] = now
    claims["exp"] = now + (ttl if ttl is not None else settings.token_ttl)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify(token: str, settings: Optional[Settings] = None) -> Identity:
    """Decode a token into an :class:`Identity` or raise :class:`InvalidToken`."""

    settings = settings or get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
        return Identity.model_validate(claims)
    except (jwt.PyJWTError, ValidationError) as exc:
        raise InvalidToken(str(exc)) from exc


def issue_token(user: Any, settings: Optional[Settings] = None) -> str:
    """Token for a ``User`` row."""

    payload = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value if isinstance(user.role, UserRole) else user.role,
    }
    return sign(payload, settings=settings)
