"""
Custom exceptions for the overseas trip tracker.

Every expected failure of a core operation is one of these types. The API
layer maps them to HTTP responses in ``error_handlers``.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE = "INVALID_DATE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_VERSION = "INVALID_VERSION"

    # Lookup / state errors
    NOT_FOUND = "NOT_FOUND"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Authentication errors
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # System errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    MAIL_DELIVERY_FAILED = "MAIL_DELIVERY_FAILED"
    JOB_FAILED = "JOB_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class TrackerException(Exception):
    """Base exception for the tracker backend."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code


class TripValidationError(TrackerException):
    """Raised when submitted input is malformed, missing, or breaks a trip invariant."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            status_code=400
        )


class InvalidDateError(TripValidationError):
    """Raised when a value cannot be read as a calendar date."""

    def __init__(self, value: Any, field: Optional[str] = None):
        details = {"value": str(value)}
        if field:
            details["field"] = field
        super().__init__(
            message=f"Invalid date: {value!r}",
            details=details,
            error_code=ErrorCode.INVALID_DATE,
        )


class DateRangeError(TripValidationError):
    """Raised when a departure date falls after the return date."""

    def __init__(self, departure, return_date):
        super().__init__(
            message="Return date cannot be before departure date",
            details={
                "departure_date": departure.isoformat(),
                "return_date": return_date.isoformat(),
            },
            error_code=ErrorCode.INVALID_DATE_RANGE,
        )


class InvalidVersionError(TripValidationError):
    """Raised when an update names a version the server never issued."""

    def __init__(self, trip_id: int, expected_version: int, current_version: int):
        super().__init__(
            message=f"Trip {trip_id} has no version {expected_version}",
            details={
                "trip_id": trip_id,
                "expected_version": expected_version,
                "current_version": current_version,
            },
            error_code=ErrorCode.INVALID_VERSION,
        )


class NotFoundError(TrackerException):
    """Raised when a referenced trip, account or company does not exist."""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            message=f"{entity.capitalize()} not found",
            error_code=ErrorCode.NOT_FOUND,
            details={"entity": entity, "id": identifier},
            status_code=404
        )
        self.entity = entity
        self.identifier = identifier


class VersionConflictError(TrackerException):
    """
    Raised when a trip was modified by someone else since the caller read it.

    ``server_copy`` is the current stored trip, so the caller can show the
    conflict and retry against its version.
    """

    def __init__(self, trip_id: int, expected_version: int, server_copy: Dict[str, Any]):
        super().__init__(
            message="Trip was modified by someone else.",
            error_code=ErrorCode.VERSION_CONFLICT,
            details={
                "trip_id": trip_id,
                "expected_version": expected_version,
                "server_copy": server_copy,
            },
            status_code=409
        )
        self.trip_id = trip_id
        self.expected_version = expected_version
        self.server_copy = server_copy


class DuplicateError(TrackerException):
    """Raised when a unique name (username, company) is already taken."""

    def __init__(self, entity: str, value: str):
        super().__init__(
            message=f"{entity.capitalize()} already exists",
            error_code=ErrorCode.ALREADY_EXISTS,
            details={"entity": entity, "value": value},
            status_code=409
        )


class AuthenticationError(TrackerException):
    """Raised when credentials or a bearer token are missing or invalid."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTHENTICATION_FAILED,
            status_code=401
        )


class PermissionDeniedError(TrackerException):
    """Raised when an authenticated account lacks the required role."""

    def __init__(self, message: str = "Admin only"):
        super().__init__(
            message=message,
            error_code=ErrorCode.PERMISSION_DENIED,
            status_code=403
        )


class TransientStorageError(TrackerException):
    """Raised when the database is unreachable or a call timed out. Safe to retry."""

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Storage temporarily unavailable during {operation}",
            error_code=ErrorCode.STORAGE_UNAVAILABLE,
            details=details or {"operation": operation},
            status_code=503
        )


class MailDeliveryError(TrackerException):
    """Raised when the SMTP server rejects or cannot receive a message."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Mail delivery failed: {reason}",
            error_code=ErrorCode.MAIL_DELIVERY_FAILED,
            details={"reason": reason},
            status_code=502
        )


class JobFailedError(TrackerException):
    """Raised when a manually triggered job run ends in error."""

    def __init__(self, job: str, reason: str):
        super().__init__(
            message=f"Job {job} failed: {reason}",
            error_code=ErrorCode.JOB_FAILED,
            details={"job": job, "reason": reason},
            status_code=500
        )
