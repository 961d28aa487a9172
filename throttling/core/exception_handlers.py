"""Exception handlers mapping throttling errors to HTTP responses.

- ConfigurationError -> 500 (the service is misconfigured)
- StorageError -> 503 (the counter store is unavailable)
- Other AppError -> 400
- Unexpected Exception -> generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from throttling.core.errors import AppError, ConfigurationError, StorageError

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, StorageError):
        return 503
    if isinstance(exc, ConfigurationError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as ``{"error": {"code", "message", "details"?}}``."""
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    error_content = {"code": exc.code, "message": exc.message}
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; never leaks exception text."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the handlers on a FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
