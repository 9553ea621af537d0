# gate_register/utils/clock.py
"""
Time source for the register. Every timestamp the Registry writes comes from
a clock object, so tests can pin "now" instead of racing the wall clock.
Times are local and naive: "today" means the local calendar day.
"""

from datetime import datetime, timedelta


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FrozenClock:
    """A clock that only moves when told to."""

    def __init__(self, at: datetime):
        self._now = at

    def now(self) -> datetime:
        return self._now

    def set(self, at: datetime):
        self._now = at

    def advance(self, **delta) -> datetime:
        """Move forward by timedelta keyword args, e.g. advance(minutes=5)."""
        self._now = self._now + timedelta(**delta)
        return self._now


def to_local_naive(value):
    """Aware datetimes are converted to local time and stripped; naive ones pass through."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value
