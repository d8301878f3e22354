"""
Status Resolver - derives a trip's lifecycle stage from its dates

Used by trip creation, date-changing updates, the read path and the batch
transition job, so they all agree on the rule.
"""
from datetime import date

from overseas_tracker.models.trip import TripStatus

# Natural order of automatically derived stages
_PROGRESSION = {
    TripStatus.UPCOMING: 0,
    TripStatus.ACTIVE: 1,
    TripStatus.COMPLETED: 2,
}


def resolve_status(departure: date, return_date: date, today: date) -> TripStatus:
    """
    Derive status from dates.

    Args:
        departure: First day of the trip
        return_date: Last day of the trip
        today: Current calendar day

    Returns:
        COMPLETED once the return day has passed, ACTIVE from departure
        through return (inclusive), UPCOMING before departure
    """
    if departure > return_date:
        raise ValueError(
            f"departure {departure} is after return {return_date}; validate before resolving"
        )
    if return_date < today:
        return TripStatus.COMPLETED
    if departure <= today:
        return TripStatus.ACTIVE
    return TripStatus.UPCOMING


def reconcile_status(
    stored: TripStatus,
    departure: date,
    return_date: date,
    today: date,
) -> TripStatus:
    """
    Combine a persisted status with the one derived for today.

    CANCELLED is never overridden. Otherwise the result is whichever of the
    two is further along UPCOMING -> ACTIVE -> COMPLETED, so a recompute
    never moves a trip backwards.
    """
    if stored == TripStatus.CANCELLED:
        return stored
    derived = resolve_status(departure, return_date, today)
    if _PROGRESSION[derived] > _PROGRESSION[stored]:
        return derived
    return stored
