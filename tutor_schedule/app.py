"""
Startup of the schedule core.

bootstrap() is the one place where the process-wide services are built
and the notification permission is requested, replacing any implicit
"ask on import" behaviour.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .models.lesson import Lesson
from .models.notification import PermissionState, ScheduleResult
from .notifications.permission_gate import PermissionGate
from .notifications.scheduler import NotificationScheduler
from .storage.secure_store import SecureSessionStore, SessionCredentials
from .utils.di_container import DIContainer, configure_default_services


logger = logging.getLogger(__name__)


@dataclass
class ScheduleCore:
    """
    Handles to the services the rest of the client talks to.

    Exposes the four operations callers need: permission request,
    scheduling, cancel-all, and the credential store.
    """

    store: SecureSessionStore
    credentials: SessionCredentials
    permission_gate: PermissionGate
    scheduler: NotificationScheduler

    @property
    def permission_state(self) -> PermissionState:
        return self.permission_gate.state

    async def request_permissions(self) -> bool:
        return await self.scheduler.request_permissions()

    async def schedule_notifications_for_lessons(self, lessons: Iterable[Lesson]) -> ScheduleResult:
        return await self.scheduler.schedule_notifications_for_lessons(lessons)

    async def cancel_all_lesson_notifications(self) -> int:
        return await self.scheduler.cancel_all_lesson_notifications()


async def bootstrap(container: Optional[DIContainer] = None) -> ScheduleCore:
    """
    Build the schedule core and request notification permission once.

    Args:
        container: Container with any overrides already registered
            (default: a fresh container with default services)

    Returns:
        ScheduleCore sharing one store, gate and scheduler
    """
    container = container or DIContainer()
    configure_default_services(container)

    # configures the package logger before anything logs
    container.resolve(logging.Logger)

    core = ScheduleCore(
        store=container.resolve(SecureSessionStore),
        credentials=container.resolve(SessionCredentials),
        permission_gate=container.resolve(PermissionGate),
        scheduler=container.resolve(NotificationScheduler),
    )

    if await core.request_permissions():
        logger.info("Notification permissions granted")
    else:
        logger.info("Notification permissions denied")

    return core
