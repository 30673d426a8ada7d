"""API error taxonomy and the JSON error envelope.

Every failure leaves the API as ``{"error": {"message": ..., "code": ...}}``
with a stable ``code`` clients can branch on.
"""

import logging
from typing import Any, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error with an HTTP status and a machine-readable code."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "SERVER_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"message": self.message, "code": self.code}}


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "MISSING_FIELDS"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "ACCESS_DENIED"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ServerError(ApiError):
    pass


class FieldError(ValueError):
    """Raised from schema validators to select a specific 400 code."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


def error_body(message: str, code: str) -> dict[str, Any]:
    return {"error": {"message": message, "code": code}}


def classify_validation_errors(errors: Sequence[dict[str, Any]]) -> tuple[str, str]:
    """Pick the message and code for a failed validation.

    Missing fields win; otherwise the first :class:`FieldError` decides.
    """

    specific = None
    for err in errors:
        cause = (err.get("ctx") or {}).get("error")
        if err.get("type") == "missing" or (
            isinstance(cause, FieldError) and cause.code == "MISSING_FIELDS"
        ):
            return "Missing required fields", "MISSING_FIELDS"
        if specific is None and isinstance(cause, FieldError):
            specific = cause
    if specific is not None:
        return str(specific), specific.code
    return "Missing required fields", "MISSING_FIELDS"


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers that render every error in the common envelope."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message, code = classify_validation_errors(exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message, code))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            code = "NOT_FOUND"
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            code = "METHOD_NOT_ALLOWED"
        elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
            code = "UNAUTHORIZED"
        else:
            code = "SERVER_ERROR" if exc.status_code >= 500 else "BAD_REQUEST"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error", "SERVER_ERROR"),
        )
