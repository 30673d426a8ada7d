"""Registration and login payloads."""

from typing import Optional

from pydantic import field_validator

from classconnect.errors import FieldError
from classconnect.models import UserRole
from classconnect.schemas.common import CamelModel, strip_required


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str
    role: str

    @field_validator("name", "email", "password", "role", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("role")
    @classmethod
    def _valid_role(cls, value: str) -> str:
        value = value.lower()
        if value not in {r.value for r in UserRole}:
            raise FieldError("Role must be either teacher or student", "INVALID_ROLE")
        return value


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email", "password", mode="before")
    @classmethod
    def _required(cls, value):
        return strip_required(value)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar_url: Optional[str] = None


class TokenResponse(CamelModel):
    token: str
    user: UserOut
