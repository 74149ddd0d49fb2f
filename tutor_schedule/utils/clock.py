"""
Clock abstraction.

Anything that compares against "now" takes a Clock so tests can pin the
current moment.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from .dates import to_local_aware


class Clock(ABC):
    """Source of the current moment."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current moment as a local-aware datetime."""
        pass


class SystemClock(Clock):
    """Wall clock of the running process."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(Clock):
    """
    Clock that only moves when told to.

    Examples:
        >>> clock = FixedClock(datetime(2024, 6, 13, 9, 0))
        >>> clock.advance(timedelta(hours=1))
        >>> clock.now().hour
        10
    """

    def __init__(self, moment: datetime):
        self._moment = to_local_aware(moment)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime):
        self._moment = to_local_aware(moment)

    def advance(self, delta: timedelta):
        self._moment = self._moment + delta
