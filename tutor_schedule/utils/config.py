"""
Configuration management with environment variables.

Values are read from the process environment (and a ``.env`` file when
present) once per Config instance and exposed as read-only properties.
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class SecureString:
    """
    Wrapper for sensitive strings that prevents accidental exposure.

    Examples:
        >>> token = SecureString("eyJhbGciOi...")
        >>> str(token)
        '********'
        >>> token.get_value()
        'eyJhbGciOi...'
    """

    def __init__(self, value: str):
        self._value = value

    def get_value(self) -> str:
        """
        Get the actual value.

        Warning:
            Never log the result.
        """
        return self._value

    def __str__(self) -> str:
        return "********"

    def __repr__(self) -> str:
        return "SecureString(********)"

    def __eq__(self, other) -> bool:
        if isinstance(other, SecureString):
            return self._value == other._value
        return False

    def __hash__(self) -> int:
        return hash(self._value)


class Config:
    """
    Application configuration manager.

    Attributes:
        reminder_lead_minutes: Minutes before a lesson its reminder fires
        storage_backend: ``auto``, ``file`` or ``keyring``
        storage_path: JSON file used by the unencrypted backend
        keyring_service: Service name for OS keychain entries
        notification_channel_id: Channel lesson reminders are grouped under
        log_level: Logging level name
        log_file: Optional rotating log file

    Examples:
        >>> config = Config()
        >>> if config.validate():
        ...     lead = config.reminder_lead_time
    """

    VALID_BACKENDS = ["auto", "file", "keyring"]
    VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration by loading environment variables.

        Args:
            env_file: Explicit .env path (default: search for one)
        """
        # never overrides variables already set in the environment
        load_dotenv(env_file)

        self._reminder_lead_minutes = int(
            os.getenv("LESSON_REMINDER_LEAD_MINUTES", "60")
        )

        self._storage_backend = os.getenv("SESSION_STORAGE_BACKEND", "auto").lower()
        self._storage_path = Path(
            os.getenv("SESSION_STORAGE_PATH", "output/session_store.json")
        )
        self._keyring_service = os.getenv("KEYRING_SERVICE_NAME", "tutor-schedule")

        self._notification_channel_id = os.getenv(
            "NOTIFICATION_CHANNEL_ID", "lesson-reminders"
        )

        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self._log_file = os.getenv("LOG_FILE") or None

    @property
    def reminder_lead_minutes(self) -> int:
        return self._reminder_lead_minutes

    @property
    def reminder_lead_time(self) -> timedelta:
        """Lead offset as a timedelta."""
        return timedelta(minutes=self._reminder_lead_minutes)

    @property
    def storage_backend(self) -> str:
        return self._storage_backend

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    @property
    def keyring_service(self) -> str:
        return self._keyring_service

    @property
    def notification_channel_id(self) -> str:
        return self._notification_channel_id

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def log_file(self) -> Optional[str]:
        return self._log_file

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: If validation fails, listing every problem found
        """
        errors = []

        if self._reminder_lead_minutes <= 0:
            errors.append("LESSON_REMINDER_LEAD_MINUTES must be positive")

        if self._storage_backend not in self.VALID_BACKENDS:
            errors.append(
                f"SESSION_STORAGE_BACKEND must be one of: {', '.join(self.VALID_BACKENDS)}"
            )

        if not self._keyring_service:
            errors.append("KEYRING_SERVICE_NAME is required")

        if not self._notification_channel_id:
            errors.append("NOTIFICATION_CHANNEL_ID is required")

        if self._log_level not in self.VALID_LOG_LEVELS:
            errors.append(
                f"LOG_LEVEL must be one of: {', '.join(self.VALID_LOG_LEVELS)}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        return True
