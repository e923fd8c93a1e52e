# app/core/exceptions.py
"""
Typed errors raised by the booking core.

The request layer maps each one to an HTTP status through
``register_exception_handlers``; services never return silent defaults.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for booking domain errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Malformed input, e.g. a slot whose start is not before its end"""

    status_code = 400


class ForbiddenError(BookingError):
    """The requester does not own the resource"""

    status_code = 403


class NotFoundError(BookingError):
    """Slot, appointment, service or provider is absent"""

    status_code = 404


class ConflictError(BookingError):
    """Slot race lost, duplicate slot, or a state that forbids the change"""

    status_code = 409


class TransientStoreError(BookingError):
    """Connection or lock timeout; safe for the caller to retry"""

    status_code = 503


async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
