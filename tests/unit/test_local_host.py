"""
Unit tests for LocalNotificationHost.
"""

import asyncio
from datetime import timedelta

import pytest

from tutor_schedule.models.notification import NotificationContent, PermissionState
from tutor_schedule.notifications.local_host import LocalNotificationHost
from tutor_schedule.notifications.permission_gate import PermissionGate
from tutor_schedule.notifications.scheduler import NotificationScheduler
from tutor_schedule.utils.clock import SystemClock

from conftest import make_lesson


CONTENT = NotificationContent(title="Upcoming Lesson", body="Lesson starts at 16:00",
                              data={"type": "lesson_reminder", "lessonId": "a"})


class TestLocalNotificationHost:
    """Test suite for the event loop backed host."""

    @pytest.fixture
    def delivered(self):
        return []

    @pytest.fixture
    def local_host(self, delivered):
        return LocalNotificationHost(deliver=lambda nid, content: delivered.append((nid, content)))

    @pytest.mark.asyncio
    async def test_permission_flow(self, local_host):
        assert await local_host.get_permission_status() == PermissionState.UNKNOWN
        assert await local_host.request_permission() is True
        assert await local_host.get_permission_status() == PermissionState.GRANTED

    @pytest.mark.asyncio
    async def test_permission_refused(self):
        host = LocalNotificationHost(grant_permission=False)

        assert await host.request_permission() is False
        assert await host.get_permission_status() == PermissionState.DENIED

    @pytest.mark.asyncio
    async def test_fires_at_trigger_time(self, local_host, delivered):
        trigger = SystemClock().now() + timedelta(milliseconds=50)

        await local_host.schedule("lesson_a", trigger, CONTENT)
        await asyncio.sleep(0.2)

        assert delivered == [("lesson_a", CONTENT)]
        assert await local_host.scheduled_ids() == []

    @pytest.mark.asyncio
    async def test_same_id_replaces(self, local_host, delivered):
        trigger = SystemClock().now() + timedelta(milliseconds=50)

        await local_host.schedule("lesson_a", trigger, CONTENT)
        await local_host.schedule("lesson_a", trigger, CONTENT)
        await asyncio.sleep(0.2)

        assert len(delivered) == 1

    @pytest.mark.asyncio
    async def test_cancel_prevents_delivery(self, local_host, delivered):
        trigger = SystemClock().now() + timedelta(milliseconds=50)
        await local_host.schedule("lesson_a", trigger, CONTENT)

        await local_host.cancel("lesson_a")
        await asyncio.sleep(0.2)

        assert delivered == []

    @pytest.mark.asyncio
    async def test_cancel_all(self, local_host):
        trigger = SystemClock().now() + timedelta(hours=1)
        await local_host.schedule("lesson_a", trigger, CONTENT)
        await local_host.schedule("lesson_b", trigger, CONTENT)

        await local_host.cancel_all()

        assert await local_host.scheduled_ids() == []

    @pytest.mark.asyncio
    async def test_rejects_past_trigger(self, local_host):
        with pytest.raises(ValueError, match="not in the future"):
            await local_host.schedule("lesson_a", SystemClock().now() - timedelta(seconds=1), CONTENT)

    @pytest.mark.asyncio
    async def test_pending_content(self, local_host):
        await local_host.schedule("lesson_a", SystemClock().now() + timedelta(hours=1), CONTENT)

        assert local_host.pending_content("lesson_a") == CONTENT
        await local_host.cancel_all()

    def test_respond_notifies_listeners(self, local_host):
        taps = []
        local_host.add_response_listener(taps.append)

        local_host.respond(CONTENT)

        assert taps == [CONTENT.data]

    @pytest.mark.asyncio
    async def test_delivery_error_is_contained(self):
        def broken(nid, content):
            raise RuntimeError("display failed")

        host = LocalNotificationHost(deliver=broken)
        await host.schedule("lesson_a", SystemClock().now() + timedelta(milliseconds=20), CONTENT)
        await asyncio.sleep(0.1)

        assert await host.scheduled_ids() == []


class TestSchedulerWithLocalHost:
    """Integration of scheduler, gate and local host."""

    @pytest.mark.asyncio
    async def test_end_to_end_reminder(self):
        delivered = []
        host = LocalNotificationHost(deliver=lambda nid, content: delivered.append(nid))
        scheduler = NotificationScheduler(
            host, PermissionGate(host), lead_time=timedelta(minutes=30)
        )
        now = SystemClock().now()
        soon = make_lesson("soon", now + timedelta(minutes=30, milliseconds=50))
        later = make_lesson("later", now + timedelta(hours=3))

        result = await scheduler.schedule_notifications_for_lessons([soon, later])
        await asyncio.sleep(0.2)

        assert result.scheduled_ids == ["soon", "later"]
        assert delivered == ["lesson_soon"]
        # records do not track delivery; both are still SCHEDULED
        assert await scheduler.cancel_all_lesson_notifications() == 2
        assert await host.scheduled_ids() == []
