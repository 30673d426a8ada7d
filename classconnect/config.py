"""Application configuration.

All options are read from ``CLASSCONNECT_*`` environment variables (or a
``.env`` file) through Pydantic Settings.
"""

import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class Settings(BaseSettings):
    """Core settings.

    - ``database_url``: SQLite by default so the API starts with no setup.
      When ``db_host`` is set a MySQL URL is assembled from the ``db_*``
      options and used instead.
    - ``jwt_secret``: required, startup fails without it.
    - ``upload_dir``: where uploaded attachments are written.
    """

    database_url: str = Field(
        default="sqlite:///./storage/classconnect.db", description="SQLAlchemy database URL"
    )
    db_host: Optional[str] = None
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "classconnect"
    db_port: int = 3306
    db_pool_size: int = 10

    jwt_secret: Optional[str] = Field(default=None, description="Token signing secret")
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = Field(default="1d", description="Token lifetime, e.g. 1d, 12h, 30m")

    host: str = "0.0.0.0"
    port: int = 3000

    upload_dir: Path = Field(default=Path("./uploads"), description="Uploaded file directory")
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_files_per_request: int = 5

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "CLASSCONNECT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def sqlalchemy_url(self) -> str:
        if self.db_host:
            return (
                f"mysql+pymysql://{self.db_user}:{self.db_password}"
                f"@{self.db_host}:{self.db_port}/{self.db_name}"
            )
        return self.database_url

    @property
    def token_ttl(self) -> timedelta:
        return parse_duration(self.jwt_expires_in)


def parse_duration(value: str) -> timedelta:
    """Parse ``"1d"``, ``"12h"``, ``"30m"``, ``"45s"`` or plain seconds."""

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


def validate_runtime_config(settings: Settings) -> None:
    if not settings.jwt_secret or not settings.jwt_secret.strip():
        raise RuntimeError("CLASSCONNECT_JWT_SECRET must be set.")
    parse_duration(settings.jwt_expires_in)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached global settings instance."""

    return Settings()
