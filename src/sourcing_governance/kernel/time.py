"""
Clock injection

Whether an approved event is live depends on the clock (open_at <= now), as
do award and audit timestamps. Workflows ask a TimeProvider instead of
calling datetime.now() so tests can put an event before or inside its
bidding window at will.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class TimeProvider(Protocol):
    """Source of the current UTC time"""

    def now(self) -> datetime:
        ...


class RealTimeProvider:
    """System clock, always timezone-aware UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class TestTimeProvider:
    """
    Frozen clock for deterministic tests

    Example:
        clock = TestTimeProvider(datetime(2025, 1, 15, 12, tzinfo=timezone.utc))
        clock.advance(days=2)  # now past the open date of the test event
    """

    __test__ = False  # not a pytest test class

    def __init__(self, current: datetime) -> None:
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set_time(self, moment: datetime) -> None:
        self.current = moment

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward by timedelta keyword arguments and return the new time"""
        self.current += timedelta(**delta)
        return self.current
