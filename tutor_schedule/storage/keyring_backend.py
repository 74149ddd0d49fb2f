"""
Encrypted storage backend on top of the OS keychain.

Uses the ``keyring`` library, which talks to macOS Keychain, Windows
Credential Locker or the Secret Service on Linux. Values are encrypted
at rest by the operating system.
"""

import asyncio
import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .interfaces import StorageBackend, StorageError


logger = logging.getLogger(__name__)


class KeyringStorageBackend(StorageBackend):
    """
    Key/value pairs stored as keychain entries under one service name.

    The keychain APIs are blocking, so every call runs in a worker thread.

    Examples:
        >>> if KeyringStorageBackend.is_available():
        ...     backend = KeyringStorageBackend("tutor-schedule")
    """

    name = "keyring"
    encrypted = True

    def __init__(self, service_name: str):
        self.service_name = service_name

    @staticmethod
    def is_available() -> bool:
        """
        Check whether a real OS keychain is reachable.

        The fail and null keyrings that ``keyring`` falls back to have a
        priority below 1 and do not count.
        """
        try:
            backend = keyring.get_keyring()
        except Exception as e:
            logger.warning(f"Keyring lookup failed: {e}")
            return False

        priority = getattr(backend, "priority", 0)
        return priority is not None and priority >= 1

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(keyring.get_password, self.service_name, key)
        except KeyringError as e:
            raise StorageError(key, "get", e) from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(keyring.set_password, self.service_name, key, value)
        except KeyringError as e:
            raise StorageError(key, "set", e) from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(keyring.delete_password, self.service_name, key)
        except PasswordDeleteError:
            # entry did not exist
            logger.debug(f"Keyring entry '{key}' already absent")
        except KeyringError as e:
            raise StorageError(key, "delete", e) from e
