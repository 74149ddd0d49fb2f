"""
Lesson reminders: permission handling and scheduling.
"""

from .interfaces import (
    NotificationHost,
    NotificationRegistrationError,
    PermissionUnavailableError,
)
from .local_host import LocalNotificationHost
from .permission_gate import PermissionGate
from .scheduler import (
    LESSON_NOTIFICATION_ID_PREFIX,
    LESSON_REMINDER_TYPE,
    NotificationScheduler,
    notification_id_for,
)

__all__ = [
    "LESSON_NOTIFICATION_ID_PREFIX",
    "LESSON_REMINDER_TYPE",
    "LocalNotificationHost",
    "NotificationHost",
    "NotificationRegistrationError",
    "NotificationScheduler",
    "PermissionGate",
    "PermissionUnavailableError",
    "notification_id_for",
]
