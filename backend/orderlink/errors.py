"""Domain errors rendered as ``{"success": false, "error": ...}`` responses."""

from fastapi import status
from fastapi.responses import JSONResponse


class OrderLinkError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(OrderLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(OrderLinkError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(OrderLinkError):
    status_code = status.HTTP_409_CONFLICT


def internal_error_response() -> JSONResponse:
    """Generic 500 body; details stay in the logs."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )
