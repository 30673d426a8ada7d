"""Database engine, session lifecycle and transaction scope."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from classconnect.config import Settings
from classconnect.errors import ServerError


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def build_engine(url: str, pool_size: int = 10) -> Engine:
    """Create an engine; SQLite gets ``check_same_thread=False``."""

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_size=pool_size, pool_pre_ping=True)


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, pool_size: int = 10) -> None:
        self.url = url
        self.engine = build_engine(url, pool_size=pool_size)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("Database pool created for %s", self.engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.sqlalchemy_url, pool_size=settings.db_pool_size)

    def create_all(self) -> None:
        # Models must be imported so their tables are registered on Base.metadata.
        from classconnect import models  # noqa: F401

        if self.engine.url.get_backend_name() == "sqlite" and self.engine.url.database:
            database = self.engine.url.database
            if database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(bind=self.engine)

    def check_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Database connection failed: %s", exc)
            return False
        logger.info("Database connection verified")
        return True

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session for scripts: commit on success, rollback on error, always close."""

        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


@contextmanager
def transaction(session: Session, cleanup: Optional[List[Callable[[], None]]] = None) -> Iterator[Session]:
    """All-or-nothing unit of work on a request session.

    Commits when the block exits normally. On any exception the session is
    rolled back and every ``cleanup`` callback runs (stored files are deleted
    this way). Database errors surface as ``SERVER_ERROR``; anything else
    propagates unchanged.
    """

    try:
        yield session
        session.commit()
    except BaseException as exc:
        session.rollback()
        for callback in cleanup or []:
            callback()
        if isinstance(exc, SQLAlchemyError):
            logger.exception("Transaction rolled back")
            raise ServerError("Database error, changes were rolled back", code="SERVER_ERROR") from exc
        raise
