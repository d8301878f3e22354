"""
Trip model for overseas travel records
"""
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func
import enum

from overseas_tracker.core.db import Base


class TripStatus(str, enum.Enum):
    """Trip lifecycle status"""
    UPCOMING = "UPCOMING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _missing_(cls, value):
        # Accept lower-case input and legacy names
        if isinstance(value, str):
            key = value.strip().upper()
            key = STATUS_ALIASES.get(key, key)
            if key in cls.__members__:
                return cls[key]
        return None


STATUS_ALIASES = {
    "RETURNED": "COMPLETED",
    "PLANNED": "UPCOMING",
}


class Trip(Base):
    """
    One overseas trip by one traveller.

    ``version`` starts at 1 and is bumped by every successful mutation; it is
    the compare-and-swap token for concurrent edits.
    """
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("departure_date <= return_date", name="ck_trips_date_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    traveller_id = Column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(150), nullable=False)
    email = Column(String(150), nullable=False)
    notes = Column(Text, nullable=True)
    departure_date = Column(Date, nullable=False, index=True)
    return_date = Column(Date, nullable=False, index=True)
    status = Column(
        SQLEnum(TripStatus, name="trip_status", native_enum=False, length=16),
        default=TripStatus.UPCOMING,
        nullable=False,
        index=True,
    )
    version = Column(Integer, nullable=False, default=1)
    last_modified_at = Column(DateTime(timezone=True), nullable=False)
    last_modified_by = Column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Trip id={self.id} status={self.status} version={self.version}>"
