"""
Data models for the tutoring schedule core.
"""

from .lesson import Attendance, Lesson
from .notification import (
    NotificationChannel,
    NotificationContent,
    NotificationRecord,
    NotificationStatus,
    PermissionState,
    ScheduleResult,
)
from .result import Result, ResultStatus
from .week import WeekWindow

__all__ = [
    "Attendance",
    "Lesson",
    "NotificationChannel",
    "NotificationContent",
    "NotificationRecord",
    "NotificationStatus",
    "PermissionState",
    "Result",
    "ResultStatus",
    "ScheduleResult",
    "WeekWindow",
]
