"""
Domain exceptions for the registration and check-in engine

Every expected outcome of a registration, scan or check-in that is not a
plain success is raised as one of these exceptions. Each carries a
human-readable message, a stable error code and a category; the API layer
maps the category to an HTTP status (see app.main).
"""

from datetime import datetime
from typing import Optional


class ErrorCategory:
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    RATE_LIMITED = "rate_limited"
    FORBIDDEN = "forbidden"


class RegistrationServiceError(Exception):
    """
    Base exception for the registration service

    Args:
        message: Human-readable message, safe to show to the caller
        error_code: Stable code for programmatic handling
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ValidationFailed(RegistrationServiceError):
    """Raised when input is malformed, before storage is touched"""

    category = ErrorCategory.VALIDATION

    def __init__(self, field_name: str, validation_error: str):
        message = f"Validation error in field '{field_name}': {validation_error}"
        super().__init__(message, "VALIDATION_ERROR")
        self.field_name = field_name
        self.validation_error = validation_error


# ---------------------------
# Availability
# ---------------------------

class EventUnavailable(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, event_id: int):
        super().__init__("Event not found or not available", "EVENT_UNAVAILABLE")
        self.event_id = event_id


class RegistrationNotOpen(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, opens_at: datetime):
        super().__init__("Registration has not opened yet", "REGISTRATION_NOT_OPEN")
        self.opens_at = opens_at


class RegistrationClosed(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, closed_at: datetime):
        super().__init__("Registration is closed", "REGISTRATION_CLOSED")
        self.closed_at = closed_at


class EventEnded(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, ended_at: datetime):
        super().__init__("This event has already ended", "EVENT_ENDED")
        self.ended_at = ended_at


class CapacityExceeded(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, capacity: int):
        super().__init__("Event is at full capacity", "CAPACITY_EXCEEDED")
        self.capacity = capacity


class RegistrationCancelled(RegistrationServiceError):
    category = ErrorCategory.UNAVAILABLE

    def __init__(self, registration_id: int):
        super().__init__("This registration has been cancelled", "REGISTRATION_CANCELLED")
        self.registration_id = registration_id


# ---------------------------
# Facts about existing data
# ---------------------------

class DuplicateRegistration(RegistrationServiceError):
    """
    Raised when the person already holds a registration for the event

    This is a statement of fact rather than a failure; the message is
    shown to the attendee as-is.
    """

    category = ErrorCategory.DUPLICATE

    def __init__(self, event_id: int, registration_id: Optional[int] = None):
        super().__init__("You are already registered for this event", "DUPLICATE_REGISTRATION")
        self.event_id = event_id
        self.registration_id = registration_id


class RegistrationNotFound(RegistrationServiceError):
    category = ErrorCategory.NOT_FOUND

    def __init__(self, message: str = "Registration not found"):
        super().__init__(message, "REGISTRATION_NOT_FOUND")


# ---------------------------
# Infrastructure / abuse
# ---------------------------

class StorageError(RegistrationServiceError):
    """
    Raised when the persistent store fails

    The operation and details are kept for logging only; callers get a
    generic message.
    """

    category = ErrorCategory.STORAGE

    def __init__(self, operation: str, details: str):
        super().__init__(f"Data access error during {operation}: {details}", "STORAGE_ERROR")
        self.operation = operation
        self.details = details


class RateLimited(RegistrationServiceError):
    category = ErrorCategory.RATE_LIMITED

    def __init__(self, retry_after: int, remaining: int = 0):
        super().__init__(
            "Too many registration attempts. Please try again later.", "RATE_LIMITED"
        )
        self.retry_after = retry_after
        self.remaining = remaining


class ScannerEventMismatch(RegistrationServiceError):
    category = ErrorCategory.FORBIDDEN

    def __init__(self, scanner_event_id: int, requested_event_id: int):
        super().__init__("This scanner is not assigned to the requested event", "SCANNER_EVENT_MISMATCH")
        self.scanner_event_id = scanner_event_id
        self.requested_event_id = requested_event_id
