"""
Trip schemas for API requests/responses
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import date, datetime
from enum import Enum
from typing import Optional

from overseas_tracker.core.dates import DateInput, normalize_date
from overseas_tracker.core.exceptions import InvalidDateError
from overseas_tracker.models.trip import TripStatus


def _check_date(value):
    """
    Reject unparsable dates but keep the value as sent.

    Timestamps are reduced to a day later by the service, on the app clock's
    calendar, so a late-evening UTC timestamp lands on the right day.
    """
    try:
        normalize_date(value)
    except InvalidDateError as e:
        raise ValueError(e.message) from None
    return value


class TripCreate(BaseModel):
    """Schema for creating a new trip"""
    traveller_id: int
    company_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    notes: Optional[str] = None
    departure_date: DateInput
    return_date: DateInput

    @field_validator('departure_date', 'return_date', mode='before')
    @classmethod
    def check_dates(cls, v):
        return _check_date(v)


class TripPatch(BaseModel):
    """Fields an update may change; only provided fields are applied"""
    company_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    notes: Optional[str] = None
    departure_date: Optional[DateInput] = None
    return_date: Optional[DateInput] = None
    status: Optional[TripStatus] = None

    @field_validator('departure_date', 'return_date', mode='before')
    @classmethod
    def check_dates(cls, v):
        return _check_date(v)


class TripUpdateRequest(TripPatch):
    """Update body: the patch plus the version the client last saw"""
    expected_version: int = Field(..., ge=1)

    def to_patch(self) -> TripPatch:
        fields = self.model_dump(exclude_unset=True, exclude={"expected_version"})
        return TripPatch(**fields)


class MarkReturnedRequest(BaseModel):
    return_date: Optional[DateInput] = None

    @field_validator('return_date', mode='before')
    @classmethod
    def check_return_date(cls, v):
        return _check_date(v)


class TripRead(BaseModel):
    """Schema for trip read response"""
    id: int
    traveller_id: int
    company_id: Optional[int]
    name: str
    email: str
    notes: Optional[str]
    departure_date: date
    return_date: date
    status: TripStatus
    version: int
    last_modified_at: datetime
    last_modified_by: Optional[int]
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TripView(TripRead):
    """Listing row: status is recomputed for today, the persisted value kept alongside"""
    stored_status: TripStatus
    company_name: Optional[str] = None
    traveller_username: Optional[str] = None


class TripCreated(BaseModel):
    trip_id: int
    status: TripStatus
    version: int


class TripListView(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ALL = "all"


class TripFilter(BaseModel):
    view: TripListView = TripListView.ALL
    company_id: Optional[int] = None
    traveller_id: Optional[int] = None


class TransitionCounts(BaseModel):
    activated: int = 0
    completed: int = 0
