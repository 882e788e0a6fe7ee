"""Error taxonomy shared by the evaluation pipeline and the HTTP layer."""

from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger(__name__)


class AppError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError, ValueError):
    """
    Missing or malformed input.

    Also a ValueError so pydantic validators can raise it and have it reported as a field error.
    """

    status_code = 400


class NotFoundError(AppError):
    """Unknown patient or alert id."""

    status_code = 404


class InternalError(AppError):
    status_code = 500


class ChannelError(AppError):
    """
    Provider-side notification failure.

    Captured by the dispatcher into a dispatch outcome; it never reaches an HTTP client.
    """

    status_code = 502

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


def error_body(message: str, path: str, status_code: int) -> dict[str, object]:
    return {
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": path,
        "statusCode": status_code,
    }


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = str(error.get("msg", "invalid value"))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_error", status=exc.status_code, error=exc.message)
    else:
        log.warning("request_rejected", status=exc.status_code, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, request.url.path, exc.status_code),
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = _describe_validation_error(exc)
    log.warning("request_rejected", status=400, error=message)
    return JSONResponse(
        status_code=400, content=error_body(message, request.url.path, 400)
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route not found: {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, request.url.path, exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", error=str(exc))
    return JSONResponse(
        status_code=500,
        content=error_body("Internal Server Error", request.url.path, 500),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
