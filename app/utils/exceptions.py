"""
Domain errors raised by services and dependencies.

Each error is an HTTPException so it propagates out of route handlers
unchanged; app.main renders it in the standard error envelope.
"""
from typing import Any, Optional
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ERROR"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Any = None, headers: Optional[dict] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_ERROR"
    default_message = "Could not validate credentials"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTHORIZATION_ERROR"
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class DuplicateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE"
    default_message = "Resource already exists"


class InvalidStateError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATE"
    default_message = "Transition not allowed from the current status"


class ConcurrencyError(InvalidStateError):
    code = "VERSION_CONFLICT"
    default_message = "Record was modified by another request; reload and retry"


class PaymentVerificationError(AppError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "PAYMENT_VERIFICATION_FAILED"
    default_message = "Payment could not be verified"


class PaymentGatewayError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "PAYMENT_GATEWAY_ERROR"
    default_message = "Payment gateway is unavailable; please try again later"
