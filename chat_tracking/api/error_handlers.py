"""
Exception handlers.

Map the domain exception hierarchy to HTTP responses so routers can
let service errors propagate.

Dependencies: fastapi, chat_tracking.core.exceptions
System role: Error to HTTP status translation
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from chat_tracking.core.exceptions import (
    ChatTrackingException,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from chat_tracking.models.common import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_MAP: list[tuple[type[ChatTrackingException], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: ChatTrackingException) -> int:
    """Resolve the HTTP status for a domain exception (subclasses included)."""
    for exc_type, status_code in STATUS_MAP:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def chat_tracking_exception_handler(request: Request, exc: ChatTrackingException) -> JSONResponse:
    """Handle domain exceptions raised by the services."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}",
        extra={"path": request.url.path, "method": request.method, "status_code": status_code},
    )

    body = ErrorResponse(error=exc.message, details=exc.details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach domain exception handlers to the application."""
    app.add_exception_handler(ChatTrackingException, chat_tracking_exception_handler)
