"""
Custom exception hierarchy for the application.
All exceptions inherit from AppException for unified handling.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        status_code: HTTP status code for API responses
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# === Not Found Errors ===

class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, entity: str, identifier: str = None, message: str = None):
        if message is None:
            message = f"{entity} not found"
            if identifier:
                message = f"{entity} '{identifier}' not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404
        )


class GymNotFoundError(NotFoundError):
    def __init__(self, gym_id: str = None):
        super().__init__("Gym", gym_id)


class OwnedGymNotFoundError(NotFoundError):
    """Caller does not own a gym."""

    def __init__(self):
        super().__init__("Gym", message="No gym found")


class TrainerNotFoundError(NotFoundError):
    def __init__(self, trainer_id: str = None):
        super().__init__("Trainer", trainer_id)


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str = None, message: str = None):
        super().__init__("Booking", booking_id, message=message)


class ServiceNotFoundError(NotFoundError):
    def __init__(self, service_id: str = None):
        super().__init__("Service", service_id)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str = None):
        super().__init__("User", user_id)


# === Validation Errors ===

class ValidationError(AppException):
    """Input validation failed."""

    def __init__(self, message: str, field: str = None, code: str = "VALIDATION_ERROR"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details
        )


class BadRequestError(AppException):
    """Request is well-formed but cannot be served as asked."""

    def __init__(self, message: str, code: str = "BAD_REQUEST", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details
        )


class InvalidActionError(BadRequestError):
    def __init__(self, action: str = None):
        super().__init__(
            message="Invalid action",
            code="INVALID_ACTION",
            details={"action": action} if action else None
        )


class ConflictError(AppException):
    """Resource already exists or state conflicts."""

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(
            message=message,
            code=code,
            status_code=409
        )


class PayloadTooLargeError(AppException):
    def __init__(self, max_mb: int):
        super().__init__(
            message=f"File exceeds {max_mb}MB limit",
            code="PAYLOAD_TOO_LARGE",
            status_code=413
        )


# === Database Errors ===

class DatabaseError(AppException):
    """Database operation failed."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=f"Database error: {message}",
            code="DATABASE_ERROR",
            status_code=500,
            details=details
        )


class ConnectionError(DatabaseError):
    def __init__(self):
        super().__init__(message="Failed to connect to database")


# === Authentication Errors ===

class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=401
        )


class InvalidTokenError(AuthenticationError):
    def __init__(self):
        super().__init__(message="Invalid or expired token")


class InsufficientPermissionsError(AppException):
    """User lacks required permissions."""

    def __init__(self, required_permission: str = None, message: str = None):
        details = {}
        if message is None:
            message = "Insufficient permissions"
            if required_permission:
                message = f"Permission '{required_permission}' required"
        if required_permission:
            details["required"] = required_permission
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details=details
        )


# === Payment Errors ===

class PaymentError(AppException):
    """Payment gateway call failed."""

    def __init__(self, message: str, operation: str = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            code="PAYMENT_ERROR",
            status_code=502,
            details=details
        )


class InvalidSignatureError(AppException):
    def __init__(self):
        super().__init__(
            message="Invalid payment signature",
            code="INVALID_SIGNATURE",
            status_code=400
        )


# === Booking Errors ===

class BookingError(AppException):
    """Booking cannot be created or changed."""

    def __init__(self, message: str, code: str = "BOOKING_ERROR", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            details=details
        )


class SlotUnavailableError(BookingError):
    def __init__(self, time_label: str):
        super().__init__(
            message=f"Gym is closed or no slot available at {time_label}",
            code="SLOT_UNAVAILABLE",
            details={"time": time_label}
        )


class SlotFullError(BookingError):
    def __init__(self, time_label: str):
        super().__init__(
            message=f"Slot at {time_label} is fully booked",
            code="SLOT_FULL",
            details={"time": time_label}
        )


class SlotOverlapError(BookingError):
    def __init__(self, message: str = "Time slot overlaps with an existing slot"):
        super().__init__(message=message, code="SLOT_OVERLAP")


class TrainerUnavailableError(BookingError):
    def __init__(self):
        super().__init__(
            message="Trainer is already booked for this time slot",
            code="TRAINER_UNAVAILABLE"
        )


# === Entry pass errors (QR verification) ===

class PassRejectedError(BookingError):
    """Entry pass failed verification. Carries the booking for the scanner UI."""

    def __init__(self, message: str, code: str, booking: Dict[str, Any] = None):
        super().__init__(message=message, code=code)
        self.booking = booking


class PassAlreadyUsedError(PassRejectedError):
    def __init__(self, booking: Dict[str, Any] = None):
        super().__init__("Booking already used", "PASS_USED", booking)


class PassUnpaidError(PassRejectedError):
    def __init__(self, booking: Dict[str, Any] = None):
        super().__init__("Payment not completed for this booking", "PASS_UNPAID", booking)


class PassCancelledError(PassRejectedError):
    def __init__(self, booking: Dict[str, Any] = None):
        super().__init__("Booking has been cancelled", "PASS_CANCELLED", booking)


class PassExpiredError(PassRejectedError):
    def __init__(self, booking: Dict[str, Any] = None):
        super().__init__("Booking has expired", "PASS_EXPIRED", booking)
