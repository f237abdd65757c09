"""Domain errors raised by the service layer.

Each error carries the HTTP status the API should answer with; the handler
registered in ``casa.main`` turns them into ``{"detail": ...}`` responses so
services stay usable from scripts without importing FastAPI.
"""

from fastapi import status


class CasaError(Exception):
    """Base class for all service-layer errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(CasaError):
    default_detail = "Invalid request"


class NotFoundError(CasaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class PermissionDeniedError(CasaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed"


class ConflictError(CasaError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class BookingConflictError(ConflictError):
    default_detail = "Dates conflict with an existing booking"


class InvalidBookingTransition(ConflictError):
    default_detail = "Booking cannot move to the requested status"


class AuthenticationError(CasaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class OTPVerificationError(CasaError):
    default_detail = "Invalid or expired OTP"


class PaymentVerificationError(CasaError):
    default_detail = "Payment verification failed"


class PaymentGatewayError(CasaError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway request failed"
