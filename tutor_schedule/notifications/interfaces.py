"""
Abstract interface for the host notification service.

Delivery of reminders belongs to the host platform. The core only needs
the capabilities listed here, which keeps the scheduler testable with a
fake host.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..models.notification import NotificationChannel, NotificationContent, PermissionState


ResponseListener = Callable[[Dict[str, Any]], None]


class PermissionUnavailableError(Exception):
    """Raised by a host when its permission subsystem cannot be reached."""
    pass


class NotificationRegistrationError(Exception):
    """
    Raised when the host refuses to register a lesson reminder.

    Attributes:
        lesson_id: Lesson whose reminder could not be registered
    """

    def __init__(self, lesson_id: str, reason: str, cause: Optional[BaseException] = None):
        self.lesson_id = lesson_id
        self.reason = reason
        self.cause = cause
        super().__init__(f"Could not register reminder for lesson '{lesson_id}': {reason}")


class NotificationHost(ABC):
    """
    Host-side notification capabilities.

    ``schedule()`` with an identifier that is already registered must
    replace the earlier notification.
    """

    #: False on hosts that cannot show local notifications at all (web)
    supports_notifications: bool = True

    @abstractmethod
    async def get_permission_status(self) -> PermissionState:
        """Read the current OS permission without prompting."""
        pass

    @abstractmethod
    async def request_permission(self) -> bool:
        """Show the OS permission prompt and return whether it was granted."""
        pass

    @abstractmethod
    async def ensure_channel(self, channel: NotificationChannel) -> None:
        """Create the delivery channel if the platform uses channels."""
        pass

    @abstractmethod
    async def schedule(
        self,
        notification_id: str,
        trigger_time: datetime,
        content: NotificationContent
    ) -> None:
        """Register a notification firing at ``trigger_time``."""
        pass

    @abstractmethod
    async def cancel(self, notification_id: str) -> None:
        """Cancel one pending notification; unknown ids are ignored."""
        pass

    @abstractmethod
    async def cancel_all(self) -> None:
        """Cancel every pending notification of this application."""
        pass

    @abstractmethod
    async def scheduled_ids(self) -> List[str]:
        """Identifiers of all pending notifications."""
        pass

    @abstractmethod
    def add_response_listener(self, listener: ResponseListener) -> None:
        """Call ``listener`` with the payload when the user taps a notification."""
        pass
