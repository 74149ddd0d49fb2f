"""
Lesson notification scheduler.

This module keeps the host's pending lesson reminders in step with the
lesson schedule. Every lesson gets at most one reminder, identified by a
notification id derived from the lesson id, so scheduling the same
lessons again replaces reminders instead of duplicating them.

All operations that touch notification state are serialized by one
asyncio lock: a cancel-all never interleaves with a scheduling batch.
"""

import asyncio
import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from ..models.lesson import Lesson
from ..models.notification import (
    NotificationContent,
    NotificationRecord,
    NotificationStatus,
    ScheduleResult,
)
from ..models.result import Result
from ..utils.clock import Clock, SystemClock
from ..utils.dates import format_time, to_local_aware
from ..validation.lesson_validator import LessonValidator
from .interfaces import NotificationHost, NotificationRegistrationError
from .permission_gate import PermissionGate


logger = logging.getLogger(__name__)


LESSON_NOTIFICATION_ID_PREFIX = "lesson_"
LESSON_REMINDER_TYPE = "lesson_reminder"


def notification_id_for(lesson_id: str) -> str:
    """
    Derive the host notification id for a lesson.

    Examples:
        >>> notification_id_for("8f2c")
        'lesson_8f2c'
    """
    return f"{LESSON_NOTIFICATION_ID_PREFIX}{lesson_id}"


def build_reminder_content(lesson: Lesson, channel_id: Optional[str] = None) -> NotificationContent:
    """Title, body and tap payload for a lesson reminder."""
    return NotificationContent(
        title="Upcoming Lesson",
        body=f"Lesson starts at {format_time(lesson.start_time)}",
        data={
            "lessonId": lesson.id,
            "lessonStartTime": to_local_aware(lesson.start_time).isoformat(),
            "type": LESSON_REMINDER_TYPE,
        },
        channel_id=channel_id,
    )


class NotificationScheduler:
    """
    Reconciles lesson reminders with a set of lessons.

    Examples:
        >>> scheduler = NotificationScheduler(host, gate, lead_time=timedelta(minutes=30))
        >>> result = await scheduler.schedule_notifications_for_lessons(lessons)
        >>> print(f"{len(result.scheduled)} scheduled, {len(result.skipped)} skipped")
        >>> await scheduler.cancel_all_lesson_notifications()
    """

    def __init__(
        self,
        host: NotificationHost,
        permission_gate: PermissionGate,
        clock: Optional[Clock] = None,
        lead_time: timedelta = timedelta(minutes=60),
        channel_id: Optional[str] = None,
        validator: Optional[LessonValidator] = None
    ):
        """
        Initialize NotificationScheduler.

        Args:
            host: Host notification service
            permission_gate: Process-wide permission gate
            clock: Source of "now" for past-due checks
            lead_time: How long before a lesson its reminder fires
            channel_id: Channel reminders are posted to
            validator: Lesson validator (default: LessonValidator)
        """
        if lead_time <= timedelta(0):
            raise ValueError(f"lead_time must be positive, got: {lead_time}")

        self.host = host
        self.permission_gate = permission_gate
        self.clock = clock or SystemClock()
        self.lead_time = lead_time
        self.channel_id = channel_id
        self.validator = validator or LessonValidator()

        # keyed by lesson id; at most one record per lesson
        self._records: Dict[str, NotificationRecord] = {}
        self._lock = asyncio.Lock()

    async def request_permissions(self) -> bool:
        """Ask for notification permission (see PermissionGate)."""
        return await self.permission_gate.request_permissions()

    def active_records(self) -> List[NotificationRecord]:
        """Snapshot of every record still SCHEDULED, ordered by trigger time."""
        return sorted(
            (r for r in self._records.values() if r.is_active),
            key=lambda r: r.trigger_time
        )

    def get_record(self, lesson_id: str) -> Optional[NotificationRecord]:
        return self._records.get(lesson_id)

    def trigger_time_for(self, lesson: Lesson) -> datetime:
        """Moment the reminder for ``lesson`` fires."""
        return to_local_aware(lesson.start_time) - self.lead_time

    async def schedule_notifications_for_lessons(self, lessons: Iterable[Lesson]) -> ScheduleResult:
        """
        Register one reminder per lesson.

        Lessons are skipped when permission is not granted, when their
        reminder time has already passed, when they fail validation, or
        when the host refuses the registration. A skipped lesson never
        stops the rest of the batch.

        Args:
            lessons: Lessons to remind about

        Returns:
            ScheduleResult with the registered records and skipped lesson ids
        """
        async with self._lock:
            return await self._schedule(list(lessons))

    async def cancel_all_lesson_notifications(self) -> int:
        """
        Cancel every scheduled lesson reminder.

        Host notifications carrying the lesson prefix without a matching
        record (left over from an earlier process) are cancelled as well.

        Returns:
            Number of reminders cancelled
        """
        async with self._lock:
            return await self._cancel_all()

    async def sync_lessons(self, lessons: Iterable[Lesson]) -> ScheduleResult:
        """
        Replace all lesson reminders with reminders for ``lessons``.

        Cancel and re-schedule happen under one lock acquisition.
        """
        async with self._lock:
            await self._cancel_all()
            return await self._schedule(list(lessons))

    def setup_response_listener(self, handler: Callable[[Dict], None]):
        """
        Call ``handler`` with the payload when a lesson reminder is tapped.

        Taps on other notification types are ignored.
        """
        def on_response(data: Dict):
            if data.get("type") == LESSON_REMINDER_TYPE:
                logger.info(f"Lesson reminder tapped: {data.get('lessonId')}")
                handler(data)

        self.host.add_response_listener(on_response)

    async def _schedule(self, lessons: List[Lesson]) -> ScheduleResult:
        result = ScheduleResult()

        if not await self.permission_gate.request_permissions():
            logger.warning(
                f"Notification permission not granted, skipping {len(lessons)} lessons"
            )
            result.skipped = [self._lesson_id(lesson) for lesson in lessons]
            return result

        now = self.clock.now()
        valid: Dict[str, Lesson] = {}

        for lesson in lessons:
            validation = self.validator.validate(lesson)
            if not validation.is_valid:
                logger.warning(
                    f"Skipping invalid lesson {self._lesson_id(lesson)!r}:\n"
                    f"{validation.get_summary()}"
                )
                result.skipped.append(self._lesson_id(lesson))
                continue
            # later duplicates of an id win
            valid.pop(lesson.id, None)
            valid[lesson.id] = lesson

        upcoming = sorted(valid.values(), key=lambda l: to_local_aware(l.start_time))
        logger.info(f"Scheduling reminders for {len(upcoming)} lessons")

        for lesson in upcoming:
            trigger_time = self.trigger_time_for(lesson)

            if trigger_time <= now:
                logger.debug(f"Reminder window for lesson {lesson.id} has elapsed")
                await self._retire(lesson.id)
                result.skipped.append(lesson.id)
                continue

            outcome = await self._register(lesson, trigger_time)
            if outcome.is_success:
                result.scheduled.append(outcome.value)
            else:
                result.skipped.append(lesson.id)

        logger.info(
            f"Scheduled {len(result.scheduled)} lesson reminders, "
            f"skipped {len(result.skipped)}"
        )
        return result

    async def _register(self, lesson: Lesson, trigger_time: datetime) -> Result[NotificationRecord]:
        notification_id = notification_id_for(lesson.id)
        content = build_reminder_content(lesson, self.channel_id)

        try:
            await self.host.schedule(notification_id, trigger_time, content)
        except Exception as e:
            error = NotificationRegistrationError(lesson.id, str(e), e)
            logger.error(str(error), exc_info=True)
            return Result.failure(str(error), error)

        record = NotificationRecord(
            lesson_id=lesson.id,
            notification_id=notification_id,
            trigger_time=trigger_time,
        )
        self._records[lesson.id] = record
        logger.debug(f"Scheduled {notification_id} at {trigger_time.isoformat()}")
        return Result.success(record, "Reminder registered")

    async def _retire(self, lesson_id: str):
        """Drop a still-active record whose reminder can no longer fire."""
        record = self._records.get(lesson_id)
        if record is None or not record.is_active:
            return

        try:
            await self.host.cancel(record.notification_id)
        except Exception as e:
            logger.warning(f"Could not cancel elapsed reminder {record.notification_id}: {e}")
        self._records[lesson_id] = dataclasses.replace(
            record, status=NotificationStatus.CANCELLED
        )

    async def _cancel_all(self) -> int:
        cancelled = 0

        for record in [r for r in self._records.values() if r.is_active]:
            try:
                await self.host.cancel(record.notification_id)
            except Exception as e:
                logger.error(f"Error cancelling {record.notification_id}: {e}", exc_info=True)
                continue
            self._records[record.lesson_id] = dataclasses.replace(
                record, status=NotificationStatus.CANCELLED
            )
            cancelled += 1

        tracked = {r.notification_id for r in self._records.values() if r.is_active}
        try:
            host_ids = await self.host.scheduled_ids()
        except Exception as e:
            logger.error(f"Error listing host notifications: {e}", exc_info=True)
            host_ids = []

        for notification_id in host_ids:
            if not notification_id.startswith(LESSON_NOTIFICATION_ID_PREFIX):
                continue
            if notification_id in tracked:
                continue
            try:
                await self.host.cancel(notification_id)
            except Exception as e:
                logger.error(f"Error cancelling {notification_id}: {e}", exc_info=True)
                continue
            cancelled += 1

        if cancelled:
            logger.info(f"Cancelled {cancelled} lesson notifications")
        return cancelled

    @staticmethod
    def _lesson_id(lesson) -> str:
        return str(getattr(lesson, "id", lesson))
