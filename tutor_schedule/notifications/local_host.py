"""
In-process notification host.

Fires reminders from the running asyncio event loop and hands them to a
delivery callback. Used by the command line tool, and anywhere there is
no platform notification service to delegate to.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..models.notification import NotificationChannel, NotificationContent, PermissionState
from ..utils.clock import Clock, SystemClock
from .interfaces import NotificationHost, ResponseListener


logger = logging.getLogger(__name__)


DeliveryCallback = Callable[[str, NotificationContent], None]


def log_delivery(notification_id: str, content: NotificationContent):
    """Default delivery: write the reminder to the log."""
    logger.info(f"[{notification_id}] {content.title}: {content.body}")


class LocalNotificationHost(NotificationHost):
    """
    Notification host backed by event loop timers.

    Pending notifications are lost when the process exits.

    Examples:
        >>> host = LocalNotificationHost(deliver=lambda nid, content: print(content.body))
        >>> await host.request_permission()
        True
    """

    def __init__(
        self,
        deliver: Optional[DeliveryCallback] = None,
        clock: Optional[Clock] = None,
        grant_permission: bool = True
    ):
        """
        Initialize LocalNotificationHost.

        Args:
            deliver: Called with (notification_id, content) when a reminder fires
            clock: Clock used to turn trigger times into delays
            grant_permission: Answer given to the permission prompt
        """
        self.deliver = deliver or log_delivery
        self.clock = clock or SystemClock()
        self.grant_permission = grant_permission
        self.channels: Dict[str, NotificationChannel] = {}

        self._permission = PermissionState.UNKNOWN
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._pending: Dict[str, NotificationContent] = {}
        self._listeners: List[ResponseListener] = []

    async def get_permission_status(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> bool:
        self._permission = (
            PermissionState.GRANTED if self.grant_permission else PermissionState.DENIED
        )
        return self._permission == PermissionState.GRANTED

    async def ensure_channel(self, channel: NotificationChannel) -> None:
        self.channels[channel.id] = channel

    async def schedule(
        self,
        notification_id: str,
        trigger_time: datetime,
        content: NotificationContent
    ) -> None:
        """
        Arm a timer for ``trigger_time``.

        Raises:
            ValueError: If the trigger time is not in the future
        """
        delay = (trigger_time - self.clock.now()).total_seconds()
        if delay <= 0:
            raise ValueError(f"Trigger time {trigger_time.isoformat()} is not in the future")

        self._disarm(notification_id)

        loop = asyncio.get_running_loop()
        self._timers[notification_id] = loop.call_later(delay, self._fire, notification_id)
        self._pending[notification_id] = content
        logger.debug(f"Armed {notification_id} in {delay:.0f}s")

    async def cancel(self, notification_id: str) -> None:
        self._disarm(notification_id)

    async def cancel_all(self) -> None:
        for notification_id in list(self._timers):
            self._disarm(notification_id)

    async def scheduled_ids(self) -> List[str]:
        return list(self._timers)

    def add_response_listener(self, listener: ResponseListener) -> None:
        self._listeners.append(listener)

    def pending_content(self, notification_id: str) -> Optional[NotificationContent]:
        """Content of a pending notification, if any."""
        return self._pending.get(notification_id)

    def respond(self, content: NotificationContent):
        """Simulate the user tapping a delivered notification."""
        for listener in self._listeners:
            listener(content.data)

    def _disarm(self, notification_id: str):
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        self._pending.pop(notification_id, None)

    def _fire(self, notification_id: str):
        self._timers.pop(notification_id, None)
        content = self._pending.pop(notification_id, None)
        if content is None:
            return

        try:
            self.deliver(notification_id, content)
        except Exception as e:
            logger.error(f"Delivery of {notification_id} failed: {e}", exc_info=True)
