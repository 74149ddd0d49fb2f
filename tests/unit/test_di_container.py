"""
Unit tests for the DI container, default wiring and bootstrap().
"""

import logging
from datetime import timedelta

import pytest

from tutor_schedule.app import ScheduleCore, bootstrap
from tutor_schedule.models.notification import PermissionState
from tutor_schedule.notifications.interfaces import NotificationHost
from tutor_schedule.notifications.local_host import LocalNotificationHost
from tutor_schedule.notifications.permission_gate import PermissionGate
from tutor_schedule.notifications.scheduler import NotificationScheduler
from tutor_schedule.storage.file_backend import FileStorageBackend
from tutor_schedule.storage.interfaces import StorageBackend
from tutor_schedule.storage.secure_store import SecureSessionStore
from tutor_schedule.utils.clock import Clock
from tutor_schedule.utils.config import Config
from tutor_schedule.utils.di_container import DIContainer, configure_default_services

from conftest import NOW, FakeNotificationHost, InMemoryStorageBackend, make_lesson


class Service:
    pass


class TestDIContainer:
    """Test cases for DIContainer."""

    def test_transient_creates_new_instances(self):
        container = DIContainer()
        container.register(Service, Service)

        assert container.resolve(Service) is not container.resolve(Service)

    def test_singleton_shared(self):
        container = DIContainer()
        container.register(Service, Service, singleton=True)

        assert container.resolve(Service) is container.resolve(Service)

    def test_register_instance(self):
        container = DIContainer()
        instance = Service()
        container.register_instance(Service, instance)

        assert container.resolve(Service) is instance

    def test_reregister_drops_cached_singleton(self):
        container = DIContainer()
        container.register(Service, Service, singleton=True)
        first = container.resolve(Service)

        container.register(Service, Service, singleton=True)

        assert container.resolve(Service) is not first

    def test_unregistered_service_raises(self):
        container = DIContainer()
        container.register(Service, Service)

        with pytest.raises(ValueError, match="Service not registered: Config"):
            container.resolve(Config)

    def test_clear(self):
        container = DIContainer()
        container.register(Service, Service)
        container.clear()

        assert not container.is_registered(Service)
        assert container.get_registered_services() == []


@pytest.fixture
def container(monkeypatch, clock, tmp_path):
    """Container with test doubles registered ahead of the defaults."""
    monkeypatch.setenv("LESSON_REMINDER_LEAD_MINUTES", "30")
    monkeypatch.setenv("SESSION_STORAGE_BACKEND", "file")
    monkeypatch.setenv("SESSION_STORAGE_PATH", str(tmp_path / "session.json"))
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.delenv("LOG_FILE", raising=False)

    container = DIContainer()
    container.register_instance(Clock, clock)
    container.register_instance(NotificationHost, FakeNotificationHost())
    return container


class TestDefaultServices:
    """Test cases for configure_default_services()."""

    def test_registers_core_services(self, container):
        configure_default_services(container)

        for interface in (Config, logging.Logger, StorageBackend, SecureSessionStore,
                          PermissionGate, NotificationScheduler):
            assert container.is_registered(interface)

    def test_keeps_existing_registrations(self, container, clock):
        configure_default_services(container)

        assert container.resolve(Clock) is clock
        assert isinstance(container.resolve(NotificationHost), FakeNotificationHost)

    def test_backend_selected_once(self, container):
        configure_default_services(container)

        backend = container.resolve(StorageBackend)

        assert isinstance(backend, FileStorageBackend)
        assert container.resolve(SecureSessionStore).backend is backend

    def test_scheduler_shares_gate_and_lead_time(self, container):
        configure_default_services(container)

        scheduler = container.resolve(NotificationScheduler)

        assert scheduler.permission_gate is container.resolve(PermissionGate)
        assert scheduler.lead_time == timedelta(minutes=30)
        assert scheduler.channel_id == "lesson-reminders"

    def test_default_host_is_local(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SESSION_STORAGE_BACKEND", "file")
        monkeypatch.setenv("SESSION_STORAGE_PATH", str(tmp_path / "session.json"))
        container = DIContainer()

        configure_default_services(container)

        assert isinstance(container.resolve(NotificationHost), LocalNotificationHost)

    def test_invalid_config_raises_on_resolve(self, container, monkeypatch):
        monkeypatch.setenv("SESSION_STORAGE_BACKEND", "cloud")
        configure_default_services(container)

        with pytest.raises(ValueError, match="SESSION_STORAGE_BACKEND"):
            container.resolve(Config)


class TestBootstrap:
    """Test cases for bootstrap()."""

    @pytest.mark.asyncio
    async def test_requests_permission_once(self, container):
        core = await bootstrap(container)

        host = container.resolve(NotificationHost)
        assert isinstance(core, ScheduleCore)
        assert core.permission_state == PermissionState.GRANTED
        assert host.prompt_count == 1

    @pytest.mark.asyncio
    async def test_core_operations(self, container):
        container.register_instance(StorageBackend, InMemoryStorageBackend())
        core = await bootstrap(container)

        await core.store.set_item("auth_token", "tok")
        result = await core.schedule_notifications_for_lessons(
            [make_lesson("a", NOW + timedelta(hours=3))]
        )

        assert await core.store.get_item("auth_token") == "tok"
        assert result.scheduled_ids == ["a"]
        assert await core.cancel_all_lesson_notifications() == 1
        assert await core.request_permissions() is True

    @pytest.mark.asyncio
    async def test_denied_permission_does_not_fail_startup(self, container):
        container.register_instance(NotificationHost, FakeNotificationHost(prompt_answer=False))

        core = await bootstrap(container)

        assert core.permission_state == PermissionState.DENIED
