# errors.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for rule violations raised by the booking guard."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidState(BookingError):
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(BookingError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": str(exc)},
    )


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
