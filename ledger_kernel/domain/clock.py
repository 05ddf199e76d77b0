"""
Clock -- injectable source of the current time.

Services never call ``datetime.now()`` or ``date.today()`` themselves: the
default transfer date and the journal ``posted_at`` stamp both come from the
Clock they were constructed with.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware."""

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Frozen at ``fixed_time`` (default 2024-01-01 12:00 UTC).  For tests."""

    def __init__(self, fixed_time: datetime | None = None):
        self.fixed_time = fixed_time or datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.fixed_time
