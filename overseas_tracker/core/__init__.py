"""
Core building blocks for the overseas trip tracker.
Provides the clock, date normalization, storage access and the error taxonomy.
"""

from .clock import Clock, FixedClock
from .dates import normalize_date, require_date
from .db import Base, Database, get_db, storage_errors
from .exceptions import (
    ErrorCode,
    TrackerException,
    TripValidationError,
    InvalidDateError,
    InvalidVersionError,
    DateRangeError,
    NotFoundError,
    VersionConflictError,
    DuplicateError,
    AuthenticationError,
    PermissionDeniedError,
    TransientStorageError,
    JobFailedError,
    MailDeliveryError,
)

__all__ = [
    "Clock",
    "FixedClock",
    "normalize_date",
    "require_date",
    "Base",
    "Database",
    "get_db",
    "storage_errors",
    "ErrorCode",
    "TrackerException",
    "TripValidationError",
    "InvalidDateError",
    "InvalidVersionError",
    "DateRangeError",
    "NotFoundError",
    "VersionConflictError",
    "DuplicateError",
    "AuthenticationError",
    "PermissionDeniedError",
    "TransientStorageError",
    "JobFailedError",
    "MailDeliveryError",
]
