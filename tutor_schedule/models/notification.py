"""
Notification bookkeeping models.

This module provides the records the scheduler keeps for every lesson
reminder it has handed to the host notification service, together with
the permission state and the payload sent to the host.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class PermissionState(Enum):
    """Notification permission as known to the process."""

    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


class NotificationStatus(Enum):
    """Lifecycle of a NotificationRecord."""

    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class NotificationRecord:
    """
    Link between a lesson and the reminder registered for it.

    Attributes:
        lesson_id: Lesson the reminder belongs to
        notification_id: Host identifier, derived from ``lesson_id``
        trigger_time: When the reminder fires
        status: SCHEDULED until cancelled
    """

    lesson_id: str
    notification_id: str
    trigger_time: datetime
    status: NotificationStatus = NotificationStatus.SCHEDULED

    @property
    def is_active(self) -> bool:
        return self.status == NotificationStatus.SCHEDULED


@dataclass
class ScheduleResult:
    """Outcome of one scheduling batch."""

    scheduled: List[NotificationRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def scheduled_ids(self) -> List[str]:
        return [record.lesson_id for record in self.scheduled]


@dataclass(frozen=True)
class NotificationChannel:
    """
    Delivery channel the host groups lesson reminders under.

    Hosts without channel support ignore it.
    """

    id: str = "lesson-reminders"
    name: str = "Lesson Reminders"
    description: str = "Notifications for upcoming lessons"
    importance: str = "high"


@dataclass(frozen=True)
class NotificationContent:
    """Title, body and payload handed to the host."""

    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    channel_id: Optional[str] = None
