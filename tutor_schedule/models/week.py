"""Week window model used to bound schedule queries."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WeekWindow:
    """
    Monday-to-Sunday interval in local time.

    Attributes:
        start_date: Monday at 00:00:00.000
        end_date: The following Sunday at 23:59:59.999
    """

    start_date: datetime
    end_date: datetime

    def contains(self, moment: datetime) -> bool:
        """Check whether ``moment`` falls inside the window (inclusive)."""
        return self.start_date <= moment <= self.end_date
