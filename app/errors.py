"""
Domain error hierarchy

Every error carries the HTTP status it maps to and a client-facing message.
The handlers registered in ``app.main`` turn them into the standard
``{"success": false, "message": ..., "error": ...}`` envelope.
"""
from fastapi import status
from typing import Any, Optional


class AppError(Exception):
    """Base exception for the NyumbaConnect API"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, error: Any = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(AppError):
    """Missing, invalid or expired identity"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class AuthorizationError(AppError):
    """Role or ownership mismatch"""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Duplicate listing, duplicate image, limits and unique fields"""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class PaymentError(AppError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Payment failed"


class UnexpectedError(AppError):
    """Storage or infrastructure failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
