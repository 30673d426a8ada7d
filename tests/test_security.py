from datetime import timedelta

import jwt
import pytest

from classconnect.config import Settings
from classconnect.models import User, UserRole
from classconnect.security import (
    InvalidToken,
    hash_password,
    issue_token,
    sign,
    verify,
    verify_password,
)


@pytest.fixture
def token_settings():
    return Settings(_env_file=None, jwt_secret="unit-secret", jwt_expires_in="1h")


def test_password_hash_round_trip():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_with_unrecognised_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_issue_token_carries_identity(token_settings):
    user = User(id="u-1", name="Ada", email="ada@example.com", role=UserRole.TEACHER)
    token = issue_token(user, settings=token_settings)

    identity = verify(token, settings=token_settings)
    assert identity.id == "u-1"
    assert identity.name == "Ada"
    assert identity.email == "ada@example.com"
    assert identity.role == UserRole.TEACHER

    claims = jwt.decode(token, "unit-secret", algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == 3600


def test_expired_token_is_rejected(token_settings):
    token = sign(
        {"id": "u-1", "name": "Ada", "email": "ada@example.com", "role": "teacher"},
        ttl=timedelta(seconds=-5),
        settings=token_settings,
    )
    with pytest.raises(InvalidToken):
        verify(token, settings=token_settings)


def test_token_signed_with_other_secret_is_rejected(token_settings):
    other = Settings(_env_file=None, jwt_secret="someone-else")
    token = sign(
        {"id": "u-1", "name": "Ada", "email": "ada@example.com", "role": "teacher"},
        settings=other,
    )
    with pytest.raises(InvalidToken):
        verify(token, settings=token_settings)


def test_token_without_identity_claims_is_rejected(token_settings):
    token = sign({"id": "u-1"}, settings=token_settings)
    with pytest.raises(InvalidToken):
        verify(token, settings=token_settings)


def test_token_with_unknown_role_is_rejected(token_settings):
    token = sign(
        {"id": "u-1", "name": "Ada", "email": "ada@example.com", "role": "admin"},
        settings=token_settings,
    )
    with pytest.raises(InvalidToken):
        verify(token, settings=token_settings)


def test_malformed_token_is_rejected(token_settings):
    with pytest.raises(InvalidToken):
        verify("not.a.token", settings=token_settings)
