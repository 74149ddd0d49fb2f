"""
Shared fixtures and fakes for the test suite.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

import pytest

from tutor_schedule.models.lesson import Lesson
from tutor_schedule.models.notification import (
    NotificationChannel,
    NotificationContent,
    PermissionState,
)
from tutor_schedule.notifications.interfaces import NotificationHost, PermissionUnavailableError
from tutor_schedule.notifications.permission_gate import PermissionGate
from tutor_schedule.notifications.scheduler import NotificationScheduler
from tutor_schedule.storage.interfaces import StorageBackend, StorageError
from tutor_schedule.utils.clock import FixedClock


class InMemoryStorageBackend(StorageBackend):
    """Dictionary-backed storage with optional injected failures."""

    name = "memory"
    encrypted = False

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.fail_keys: Set[str] = set()
        self.calls: List[tuple] = []

    async def get(self, key: str) -> Optional[str]:
        self.calls.append(("get", key))
        if key in self.fail_keys:
            raise StorageError(key, "get")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.calls.append(("set", key, value))
        if key in self.fail_keys:
            raise StorageError(key, "set")
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        if key in self.fail_keys:
            raise StorageError(key, "delete")
        self.data.pop(key, None)


class FakeNotificationHost(NotificationHost):
    """
    Recording notification host.

    Attributes:
        os_status: Permission the OS reports without prompting
        prompt_answer: Whether the prompt grants permission
        unavailable: Raise PermissionUnavailableError from permission calls
        fail_ids: Notification ids whose registration fails
    """

    def __init__(self, os_status=PermissionState.UNKNOWN, prompt_answer=True):
        self.os_status = os_status
        self.prompt_answer = prompt_answer
        self.unavailable = False
        self.fail_ids: Set[str] = set()
        self.fail_cancel_ids: Set[str] = set()

        self.pending: Dict[str, tuple] = {}
        self.prompt_count = 0
        self.status_queries = 0
        self.schedule_calls: List[str] = []
        self.cancel_calls: List[str] = []
        self.channels: List[NotificationChannel] = []
        self.listeners = []

    async def get_permission_status(self) -> PermissionState:
        self.status_queries += 1
        if self.unavailable:
            raise PermissionUnavailableError("permission service offline")
        return self.os_status

    async def request_permission(self) -> bool:
        if self.unavailable:
            raise PermissionUnavailableError("permission service offline")
        self.prompt_count += 1
        self.os_status = PermissionState.GRANTED if self.prompt_answer else PermissionState.DENIED
        return self.prompt_answer

    async def ensure_channel(self, channel: NotificationChannel) -> None:
        self.channels.append(channel)

    async def schedule(self, notification_id: str, trigger_time: datetime,
                       content: NotificationContent) -> None:
        self.schedule_calls.append(notification_id)
        if notification_id in self.fail_ids:
            raise RuntimeError("host rejected notification")
        self.pending[notification_id] = (trigger_time, content)

    async def cancel(self, notification_id: str) -> None:
        self.cancel_calls.append(notification_id)
        if notification_id in self.fail_cancel_ids:
            raise RuntimeError("host could not cancel")
        self.pending.pop(notification_id, None)

    async def cancel_all(self) -> None:
        self.pending.clear()

    async def scheduled_ids(self) -> List[str]:
        return list(self.pending)

    def add_response_listener(self, listener) -> None:
        self.listeners.append(listener)


NOW = datetime(2024, 6, 13, 9, 0)


def make_lesson(lesson_id: str, start: datetime, minutes: int = 60, **kwargs) -> Lesson:
    return Lesson(id=lesson_id, start_time=start, end_time=start + timedelta(minutes=minutes), **kwargs)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def memory_backend():
    return InMemoryStorageBackend()


@pytest.fixture
def host():
    return FakeNotificationHost()


@pytest.fixture
def gate(host):
    return PermissionGate(host, NotificationChannel())


@pytest.fixture
def scheduler(host, gate, clock):
    return NotificationScheduler(
        host=host,
        permission_gate=gate,
        clock=clock,
        lead_time=timedelta(minutes=30),
        channel_id="lesson-reminders"
    )


@pytest.fixture
def week_lessons():
    """Three lessons later in the week of NOW."""
    return [
        make_lesson("a", datetime(2024, 6, 13, 16, 0)),
        make_lesson("b", datetime(2024, 6, 14, 10, 30)),
        make_lesson("c", datetime(2024, 6, 15, 12, 0)),
    ]
