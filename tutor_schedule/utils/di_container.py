"""
Dependency Injection Container.

This module wires the schedule core together. Services that must exist
once per process (the storage backend, the permission gate, the
scheduler) are registered as singletons so every consumer receives the
same instance.
"""

import logging
from typing import Any, Callable, Dict, Type


logger = logging.getLogger(__name__)


class DIContainer:
    """
    Simple dependency injection container.

    Examples:
        >>> container = DIContainer()
        >>> container.register(Config, Config, singleton=True)
        >>> container.register_instance(Clock, FixedClock(datetime(2024, 6, 13, 9)))
        >>> config = container.resolve(Config)
    """

    def __init__(self):
        self._factories: Dict[Type, Callable[[], Any]] = {}
        self._singleton_types: set = set()
        self._instances: Dict[Type, Any] = {}

    def register(
        self,
        interface: Type,
        implementation: Callable[[], Any],
        singleton: bool = False
    ):
        """
        Register a factory for ``interface``.

        Re-registering replaces the factory and drops a cached singleton.

        Args:
            interface: Type consumers resolve by
            implementation: Zero-argument factory
            singleton: Create the instance once and share it
        """
        self._factories[interface] = implementation
        self._instances.pop(interface, None)

        if singleton:
            self._singleton_types.add(interface)
        else:
            self._singleton_types.discard(interface)

        logger.debug(f"Registered service: {interface.__name__} (singleton={singleton})")

    def register_instance(self, interface: Type, instance: Any):
        """Register an already built object as a singleton."""
        self.register(interface, lambda: instance, singleton=True)
        self._instances[interface] = instance

    def resolve(self, interface: Type) -> Any:
        """
        Resolve a service from the container.

        Raises:
            ValueError: If the service is not registered
        """
        if interface not in self._factories:
            raise ValueError(
                f"Service not registered: {interface.__name__}. "
                f"Available services: {', '.join(self.get_registered_services())}"
            )

        if interface not in self._singleton_types:
            return self._factories[interface]()

        if interface not in self._instances:
            logger.debug(f"Creating singleton instance: {interface.__name__}")
            self._instances[interface] = self._factories[interface]()
        return self._instances[interface]

    def is_registered(self, interface: Type) -> bool:
        return interface in self._factories

    def clear(self):
        """Forget every registration and cached instance."""
        self._factories.clear()
        self._singleton_types.clear()
        self._instances.clear()

    def get_registered_services(self) -> list:
        return [service.__name__ for service in self._factories]


def configure_default_services(container: DIContainer):
    """
    Register the default schedule core services.

    Registrations already present in the container are kept, so callers
    (tests, the CLI) can substitute a clock, backend or host first.

    Args:
        container: DI container to configure
    """
    from ..models.notification import NotificationChannel
    from ..notifications.interfaces import NotificationHost
    from ..notifications.local_host import LocalNotificationHost
    from ..notifications.permission_gate import PermissionGate
    from ..notifications.scheduler import NotificationScheduler
    from ..storage.interfaces import StorageBackend
    from ..storage.secure_store import SecureSessionStore, SessionCredentials, select_backend
    from .clock import Clock, SystemClock
    from .config import Config
    from .logger import setup_logger

    def default(interface: Type, factory: Callable[[], Any]):
        if not container.is_registered(interface):
            container.register(interface, factory, singleton=True)

    def create_config() -> Config:
        config = Config()
        config.validate()
        return config

    default(Config, create_config)

    default(
        logging.Logger,
        lambda: setup_logger(
            "tutor_schedule",
            level=getattr(logging, container.resolve(Config).log_level),
            log_file=container.resolve(Config).log_file
        )
    )

    default(Clock, SystemClock)

    default(
        StorageBackend,
        lambda: select_backend(
            preference=container.resolve(Config).storage_backend,
            file_path=container.resolve(Config).storage_path,
            service_name=container.resolve(Config).keyring_service
        )
    )

    default(SecureSessionStore, lambda: SecureSessionStore(container.resolve(StorageBackend)))
    default(SessionCredentials, lambda: SessionCredentials(container.resolve(SecureSessionStore)))

    default(NotificationHost, lambda: LocalNotificationHost(clock=container.resolve(Clock)))

    default(
        PermissionGate,
        lambda: PermissionGate(
            container.resolve(NotificationHost),
            NotificationChannel(id=container.resolve(Config).notification_channel_id)
        )
    )

    default(
        NotificationScheduler,
        lambda: NotificationScheduler(
            host=container.resolve(NotificationHost),
            permission_gate=container.resolve(PermissionGate),
            clock=container.resolve(Clock),
            lead_time=container.resolve(Config).reminder_lead_time,
            channel_id=container.resolve(Config).notification_channel_id
        )
    )

    logger.debug("Default services configured")
