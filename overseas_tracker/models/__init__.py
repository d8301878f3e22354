"""
ORM models for the overseas trip tracker.
"""

from .account import Account, AccountRole
from .company import Company
from .trip import Trip, TripStatus

__all__ = [
    "Account",
    "AccountRole",
    "Company",
    "Trip",
    "TripStatus",
]
