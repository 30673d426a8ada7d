from datetime import timedelta

import pytest

from classconnect.config import Settings, parse_duration, validate_runtime_config
from classconnect.main import create_app


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1d", timedelta(days=1)),
        ("12h", timedelta(hours=12)),
        ("30m", timedelta(minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("90", timedelta(seconds=90)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("one day")


def test_missing_secret_is_fatal():
    settings = Settings(_env_file=None, jwt_secret=None)
    with pytest.raises(RuntimeError):
        validate_runtime_config(settings)


def test_blank_secret_is_fatal():
    with pytest.raises(RuntimeError):
        validate_runtime_config(Settings(_env_file=None, jwt_secret="   "))


def test_create_app_refuses_to_start_without_secret(tmp_path):
    settings = Settings(_env_file=None, jwt_secret=None, upload_dir=tmp_path)
    with pytest.raises(RuntimeError):
        create_app(settings)


def test_sqlite_is_the_default_backend():
    settings = Settings(_env_file=None, jwt_secret="x")
    assert settings.sqlalchemy_url.startswith("sqlite")


def test_mysql_url_built_from_db_options():
    settings = Settings(
        _env_file=None,
        jwt_secret="x",
        db_host="db.internal",
        db_user="app",
        db_password="pw",
        db_name="classconnect",
        db_port=3307,
    )
    assert settings.sqlalchemy_url == "mysql+pymysql://app:pw@db.internal:3307/classconnect"


def test_token_ttl_follows_expires_in():
    settings = Settings(_env_file=None, jwt_secret="x", jwt_expires_in="2h")
    assert settings.token_ttl == timedelta(hours=2)
