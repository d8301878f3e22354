"""Wall clock bound to the configured calendar timezone."""
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from fastapi import Request


class Clock:
    """
    Single source of "what day is it".

    The resolver, the listings, the batch job and the daily summary all take
    their notion of today from the same clock.
    """

    def __init__(self, tz: ZoneInfo):
        self.tz = tz

    def now(self) -> datetime:
        """Current instant, timezone-aware UTC."""
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()

    def yesterday(self) -> date:
        return self.today() - timedelta(days=1)


class FixedClock(Clock):
    """Clock pinned to a given calendar day; used by tests and backfills."""

    def __init__(self, day: date, tz: ZoneInfo = ZoneInfo("UTC")):
        super().__init__(tz)
        self.day = day

    def now(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day, 12, tzinfo=self.tz).astimezone(timezone.utc)

    def today(self) -> date:
        return self.day

    def advance(self, days: int = 1) -> None:
        self.day = self.day + timedelta(days=days)


def get_clock(request: Request) -> Clock:
    """FastAPI dependency returning the app's clock."""
    return request.app.state.clock
