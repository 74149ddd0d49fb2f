"""
Tutor schedule command line tool.

Usage:
    tutor-reminders demo [--lead-minutes N] [--wait SECONDS]
    tutor-reminders week [--date YYYY-MM-DD] [--offset N]
    tutor-reminders token set VALUE | get [--reveal] | delete

Examples:
    # Schedule two test lessons (30 and 90 minutes from now) and wait for reminders
    tutor-reminders demo --lead-minutes 20 --wait 1800

    # Show next week's query window
    tutor-reminders week --offset 1

    # Store a session token in the selected backend
    tutor-reminders token set "eyJhbGciOi..."
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta
from typing import List, Optional

from .app import ScheduleCore, bootstrap
from .models.lesson import Attendance, Lesson
from .models.notification import NotificationContent
from .notifications.interfaces import NotificationHost
from .notifications.local_host import LocalNotificationHost
from .notifications.permission_gate import PermissionGate
from .notifications.scheduler import NotificationScheduler
from .storage.interfaces import StorageError
from .utils.clock import Clock
from .utils.config import Config, SecureString
from .utils.dates import format_date, format_time, week_window, week_window_params
from .utils.di_container import DIContainer
from .utils.logger import mask_token, setup_logger


logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="tutor-reminders",
        description="Lesson reminders and session storage for the tutoring schedule client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides LOG_LEVEL, default: INFO)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    demo = commands.add_parser("demo", help="Schedule reminders for two test lessons")
    demo.add_argument(
        "--lead-minutes",
        type=int,
        help="Minutes before a lesson its reminder fires (overrides LESSON_REMINDER_LEAD_MINUTES)"
    )
    demo.add_argument(
        "--wait",
        type=float,
        default=0,
        help="Seconds to keep running so reminders can fire (default: 0)"
    )

    week = commands.add_parser("week", help="Print the Monday-to-Sunday query window")
    week.add_argument("--date", type=parse_date, help="Reference date in YYYY-MM-DD format")
    week.add_argument("--offset", type=int, default=0, help="Weeks to shift (negative = past)")

    token = commands.add_parser("token", help="Manage the stored session token")
    token_commands = token.add_subparsers(dest="token_command", required=True)
    token_set = token_commands.add_parser("set", help="Store a token")
    token_set.add_argument("value", help="Token value")
    token_get = token_commands.add_parser("get", help="Show the stored token (masked)")
    token_get.add_argument("--reveal", action="store_true", help="Print the full token")
    token_commands.add_parser("delete", help="Delete the stored token")

    return parser.parse_args(argv)


def parse_date(value: str) -> datetime:
    """
    Parse a YYYY-MM-DD argument.

    Raises:
        argparse.ArgumentTypeError: If the format is invalid
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}': {e}")


def create_test_lessons(now: datetime) -> List[Lesson]:
    """Two lessons starting 30 and 90 minutes after ``now``, one hour each."""
    first = now + timedelta(minutes=30)
    second = now + timedelta(minutes=90)
    return [
        Lesson(
            id="test-lesson-1",
            start_time=first,
            end_time=first + timedelta(hours=1),
            description="Test Mathematics Lesson",
            address="Test Address 1",
            attendances=(Attendance("John", "Doe", True),),
        ),
        Lesson(
            id="test-lesson-2",
            start_time=second,
            end_time=second + timedelta(hours=1),
            description="Test Physics Lesson",
            address="Test Address 2",
            attendances=(Attendance("Jane", "Smith", True),),
        ),
    ]


def print_delivery(notification_id: str, content: NotificationContent):
    print(f"\n[REMINDER] {content.title}: {content.body} ({notification_id})")


async def run_demo(core: ScheduleCore, clock: Clock, wait: float) -> int:
    lessons = create_test_lessons(clock.now())
    result = await core.schedule_notifications_for_lessons(lessons)

    print("=" * 60)
    print("LESSON REMINDERS")
    print("=" * 60)
    for lesson in lessons:
        print(f"  {lesson.id}: {format_date(lesson.start_time)} {format_time(lesson.start_time)}")
    print()
    for record in result.scheduled:
        print(f"  ✓ {record.notification_id} fires at {format_time(record.trigger_time)}")
    for lesson_id in result.skipped:
        print(f"  ✗ {lesson_id} skipped")
    print("=" * 60)

    if wait > 0 and result.scheduled:
        print(f"Waiting {wait:.0f}s for reminders...")
        await asyncio.sleep(wait)

    cancelled = await core.cancel_all_lesson_notifications()
    logger.info(f"Demo finished, {cancelled} pending reminders cancelled")
    return 0


def run_week(reference: Optional[datetime], offset: int) -> int:
    window = week_window(reference, offset)
    params = week_window_params(window)
    print(f"Week: {format_date(window.start_date)} - {format_date(window.end_date)}")
    print(f"  startTime={params['startTime']}")
    print(f"  endTime={params['endTime']}")
    return 0


async def run_token(core: ScheduleCore, args: argparse.Namespace) -> int:
    key = "auth_token"
    backend = core.store.backend
    try:
        if args.token_command == "set":
            await core.store.set_item(key, args.value)
            print(f"✓ Token stored in {backend.name} storage (encrypted: {backend.encrypted})")

        elif args.token_command == "get":
            value = await core.store.get_item(key)
            if value is None:
                print("No token stored")
                return 1
            token = SecureString(value)
            print(token.get_value() if args.reveal else mask_token(token.get_value()))

        elif args.token_command == "delete":
            await core.store.delete_item(key)
            print("✓ Token deleted")

    except StorageError as e:
        logger.error(f"Token {args.token_command} failed: {e}")
        return 1

    return 0


def build_container(args: argparse.Namespace) -> DIContainer:
    """Container with the CLI's overrides registered before the defaults."""
    container = DIContainer()

    if args.log_level is not None:
        container.register(
            logging.Logger,
            lambda: setup_logger(
                "tutor_schedule",
                level=getattr(logging, args.log_level),
                log_file=container.resolve(Config).log_file
            ),
            singleton=True
        )

    if args.command == "demo":
        def create_host() -> LocalNotificationHost:
            return LocalNotificationHost(deliver=print_delivery, clock=container.resolve(Clock))

        container.register(NotificationHost, create_host, singleton=True)

        if args.lead_minutes is not None:
            container.register(
                NotificationScheduler,
                lambda: NotificationScheduler(
                    host=container.resolve(NotificationHost),
                    permission_gate=container.resolve(PermissionGate),
                    clock=container.resolve(Clock),
                    lead_time=timedelta(minutes=args.lead_minutes),
                    channel_id=container.resolve(Config).notification_channel_id
                ),
                singleton=True
            )

    return container


async def run(args: argparse.Namespace) -> int:
    if args.command == "week":
        setup_logger("tutor_schedule", level=getattr(logging, args.log_level or "INFO"))
        return run_week(args.date, args.offset)

    container = build_container(args)
    core = await bootstrap(container)

    if args.command == "demo":
        return await run_demo(core, container.resolve(Clock), args.wait)

    return await run_token(core, args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)

    try:
        return asyncio.run(run(args))
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\nERROR: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
