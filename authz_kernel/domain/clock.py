"""
Time source for authorization decisions.

Time-window and day-of-week policies read "now" from an injected ``Clock``,
and so does every ``occurred_at`` on a recorded denial.  Nothing else in the
domain or the engines reads the wall clock; ``SystemClock`` is the only
class here that does.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

# A Monday, inside business hours.
DEFAULT_TEST_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware instants."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    @abstractmethod
    def now_utc(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_utc(self) -> datetime:
        return self.now()


class DeterministicClock(Clock):
    """
    Frozen clock for tests and policy simulation.

    Reports the same instant until moved with ``advance()`` or ``set_time()``,
    so a business-hours policy can be checked at 09:00 and again at 20:00
    within one test.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._base = fixed_time or DEFAULT_TEST_TIME
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._base + self._offset

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)

    def set_time(self, time: datetime) -> None:
        self._base = time
        self._offset = timedelta()

    def advance(self, seconds: int = 1) -> None:
        self._offset += timedelta(seconds=seconds)
