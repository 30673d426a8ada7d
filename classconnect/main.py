"""FastAPI entry point: app factory, logging setup and the uvicorn runner."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from classconnect import __version__
from classconnect.api import router as api_router
from classconnect.config import Settings, get_settings, validate_runtime_config
from classconnect.db import Database
from classconnect.errors import register_exception_handlers
from classconnect.storage import URL_PREFIX, FileStorage


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    storage: Optional[FileStorage] = None,
) -> FastAPI:
    """Application factory.

    ``database`` and ``storage`` may be passed in (tests do this); otherwise
    they are built from ``settings``. Startup refuses to continue without a
    token secret.
    """

    settings = settings or get_settings()
    validate_runtime_config(settings)

    owns_database = database is None
    database = database or Database.from_settings(settings)
    storage = storage or FileStorage.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        if not database.check_connection():
            logger.warning("Starting without a verified database connection")
        logger.info("Uploads served from %s", storage.upload_dir.resolve())
        yield
        if owns_database:
            database.dispose()

    app = FastAPI(title="ClassConnect API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router)
    app.mount(URL_PREFIX, StaticFiles(directory=storage.upload_dir), name="uploads")

    @app.get("/")
    def health() -> dict[str, str]:
        return {"message": "ClassConnect API running"}

    return app


def run() -> None:
    """Console entry point: ``classconnect``."""

    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
