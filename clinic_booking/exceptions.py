from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class BookingError(Exception):
    """Base class for errors raised by the booking core."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    """A referenced patient, doctor, clinic, slot or appointment does not exist."""

    status_code = 404


class ConflictError(BookingError):
    """The slot is not available, or the store reported a write conflict."""

    status_code = 409


class InvalidTransitionError(BookingError):
    status_code = 409

    def __init__(self, current: str, requested: str, message: str = ""):
        super().__init__(message or f"Invalid status transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class ValidationError(BookingError):
    status_code = 400


class ExternalServiceError(BookingError):
    """Meeting provider or notification channel failure."""

    status_code = 502


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def booking_exception_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render booking errors with the status code of their kind"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.status_code)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
