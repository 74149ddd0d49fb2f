"""
Notification permission gate.

This module tracks whether the OS allows the application to show
notifications. One gate exists per process; it is built during startup
and shared by reference with the scheduler.

States:
- UNKNOWN: Never asked
- GRANTED: Notifications allowed
- DENIED: Refused, unsupported, or the permission subsystem is unreachable
"""

import asyncio
import logging
from typing import Optional

from ..models.notification import NotificationChannel, PermissionState
from .interfaces import NotificationHost, PermissionUnavailableError


logger = logging.getLogger(__name__)


class PermissionGate:
    """
    Tracks and requests the OS notification permission.

    The OS prompt is only shown while the state is UNKNOWN. Afterwards
    request_permissions() re-reads the OS setting without prompting, so a
    change the user made in system settings is picked up.

    Examples:
        >>> gate = PermissionGate(host, NotificationChannel())
        >>> if await gate.request_permissions():
        ...     print("Reminders enabled")
    """

    def __init__(self, host: NotificationHost, channel: Optional[NotificationChannel] = None):
        """
        Initialize PermissionGate.

        Args:
            host: Host notification service
            channel: Channel to create before the first prompt
        """
        self.host = host
        self.channel = channel
        self._state = PermissionState.UNKNOWN
        # one check/prompt sequence at a time
        self._lock = asyncio.Lock()

    @property
    def state(self) -> PermissionState:
        return self._state

    @property
    def is_granted(self) -> bool:
        return self._state == PermissionState.GRANTED

    async def request_permissions(self) -> bool:
        """
        Make sure the permission state is current.

        Concurrent callers wait for the one in progress, so a second
        caller arriving while the prompt is open re-queries instead of
        prompting again.

        Returns:
            True if notifications are allowed. Never raises; an unreachable
            permission subsystem counts as DENIED.
        """
        async with self._lock:
            return await self._refresh()

    async def _refresh(self) -> bool:
        if not self.host.supports_notifications:
            if self._state != PermissionState.DENIED:
                logger.info("Host does not support notifications")
            self._state = PermissionState.DENIED
            return False

        try:
            if self._state != PermissionState.UNKNOWN:
                status = await self.host.get_permission_status()
                if status != PermissionState.UNKNOWN:
                    self._update(status)
                    return self.is_granted
                # OS setting was reset to "not determined"
                self._state = PermissionState.UNKNOWN

            await self._prompt()

        except PermissionUnavailableError as e:
            logger.warning(f"Permission subsystem unavailable, treating as denied: {e}")
            self._state = PermissionState.DENIED

        except Exception as e:
            logger.error(f"Unexpected error requesting notification permission: {e}", exc_info=True)
            self._state = PermissionState.DENIED

        return self.is_granted

    async def _prompt(self):
        if self.channel is not None:
            await self.host.ensure_channel(self.channel)

        status = await self.host.get_permission_status()
        if status == PermissionState.GRANTED:
            self._update(status)
            return

        granted = await self.host.request_permission()
        self._update(PermissionState.GRANTED if granted else PermissionState.DENIED)

    def _update(self, status: PermissionState):
        if status != self._state:
            logger.info(f"Notification permission: {self._state.value} -> {status.value}")
        self._state = status
