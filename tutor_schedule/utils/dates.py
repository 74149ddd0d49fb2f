"""
Week boundary and date formatting helpers.

All functions are pure. Naive datetimes are treated as local time; aware
datetimes are converted to the local time zone before any calendar
arithmetic so that "Monday" and "midnight" always mean the local ones.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, Optional

from ..models.week import WeekWindow


END_OF_DAY = time(23, 59, 59, 999000)


def to_local_aware(moment: datetime) -> datetime:
    """
    Return ``moment`` as an aware datetime in the local time zone.

    Naive values are interpreted as local wall-clock time.
    """
    return moment.astimezone()


def _to_local(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone()


def _at(day: date, clock_time: time, aware: bool) -> datetime:
    moment = datetime.combine(day, clock_time)
    # attach the offset valid on that day, not the reference's
    return moment.astimezone() if aware else moment


def week_window(
    reference_date: Optional[datetime] = None,
    week_offset: int = 0
) -> WeekWindow:
    """
    Compute the Monday-to-Sunday window containing a reference moment.

    Sunday counts as day 7, so the week always starts on Monday whatever
    the locale's first day of the week is.

    Args:
        reference_date: Moment inside the wanted week (default: now)
        week_offset: Whole weeks to shift by (negative = past)

    Returns:
        WeekWindow whose bounds are naive when the reference is naive and
        local-aware when it is aware

    Examples:
        >>> window = week_window(datetime(2024, 6, 13, 15, 30))
        >>> window.start_date
        datetime.datetime(2024, 6, 10, 0, 0)
        >>> window.end_date
        datetime.datetime(2024, 6, 16, 23, 59, 59, 999000)
    """
    reference = reference_date if reference_date is not None else datetime.now()
    aware = reference.tzinfo is not None
    local = _to_local(reference)

    monday = (
        local.date()
        - timedelta(days=local.isoweekday() - 1)
        + timedelta(weeks=week_offset)
    )
    sunday = monday + timedelta(days=6)

    return WeekWindow(
        start_date=_at(monday, time.min, aware),
        end_date=_at(sunday, END_OF_DAY, aware),
    )


def format_date(ts: datetime) -> str:
    """Format as ``YYYY-MM-DD`` in local time."""
    return _to_local(ts).strftime("%Y-%m-%d")


def format_time(ts: datetime) -> str:
    """Format as 24-hour ``HH:MM`` in local time."""
    return _to_local(ts).strftime("%H:%M")


def week_window_params(window: WeekWindow) -> Dict[str, str]:
    """
    Build the query parameters the lesson source expects for a window.

    Returns:
        ``{"startTime": ..., "endTime": ...}`` as ISO 8601 strings with
        millisecond precision
    """
    return {
        "startTime": window.start_date.isoformat(timespec="milliseconds"),
        "endTime": window.end_date.isoformat(timespec="milliseconds"),
    }
