"""Time sources for the booking lifecycle.

Storage convention: ``created_at``/``updated_at`` are naive UTC, while
``appointment_date`` is a naive wall-clock time in the studio's business
timezone. Every "now" read in the services goes through a ``Clock`` so tests
can pin it.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from inkbook.config import settings


class Clock:
    """Wall-clock time source."""

    def __init__(self, tz_name: str | None = None) -> None:
        self.tz = ZoneInfo(tz_name or settings.business_timezone)

    def utcnow(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        return datetime.now(timezone.utc)

    def now(self) -> datetime:
        """Current instant as naive UTC (storage convention for timestamps)."""
        return self.utcnow().replace(tzinfo=None)

    def local_now(self) -> datetime:
        """Current wall-clock time in the business timezone, naive."""
        return self.utcnow().astimezone(self.tz).replace(tzinfo=None)

    def today(self) -> date:
        """Current calendar date in the business timezone."""
        return self.local_now().date()


class FixedClock(Clock):
    """Clock pinned to one instant. Naive datetimes are read as UTC."""

    def __init__(self, instant: datetime, tz_name: str | None = None) -> None:
        super().__init__(tz_name)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def utcnow(self) -> datetime:
        return self.instant


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return system_clock
