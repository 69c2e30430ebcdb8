"""Global exception handlers for consistent error responses.

FastAPI exception handlers that turn domain errors and unexpected failures
into the same ``{"error": "..."}`` body the contact endpoint uses.

Design:
- AppError subclasses -> appropriate HTTP status (400, 500)
- Unexpected Exception -> generic 500 (safety net)
- Internal details are logged with the request_id, never returned
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contact_api.core.errors import AppError, PersistenceAppError
from contact_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def _status_for(exc: AppError) -> int:
    if isinstance(exc, PersistenceAppError):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    - ValidationAppError -> 400 Bad Request
    - PersistenceAppError -> 500 Internal Server Error

    ``message`` is client-safe by contract; backend detail lives in
    ``details`` and only goes to the logs.
    """
    status_code = _status_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "details": exc.details,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure for debugging while returning a generic message. No
    stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"error": UNEXPECTED_ERROR_MESSAGE},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
