"""
Secure session store.

This module handles persistence of the session credential. The backend
is selected once per process (OS keychain when available, plain file
otherwise) and then used for every call; the two are never mixed.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .file_backend import FileStorageBackend
from .interfaces import StorageBackend, StorageError
from .keyring_backend import KeyringStorageBackend


logger = logging.getLogger(__name__)


def select_backend(
    preference: str = "auto",
    file_path: Path = Path("output/session_store.json"),
    service_name: str = "tutor-schedule",
    keyring_available: Optional[bool] = None
) -> StorageBackend:
    """
    Pick the storage backend for this process.

    Args:
        preference: "auto", "file" or "keyring"
        file_path: Location of the JSON document for the file backend
        service_name: Keychain service name for the keyring backend
        keyring_available: Override for keychain detection (default: probe)

    Returns:
        The backend to inject into SecureSessionStore

    Raises:
        ValueError: If preference is unknown, or "keyring" is requested
            on a host without a keychain
    """
    if preference not in ("auto", "file", "keyring"):
        raise ValueError(f"Unknown storage backend preference: {preference}")

    if keyring_available is None:
        keyring_available = KeyringStorageBackend.is_available()

    if preference == "keyring" and not keyring_available:
        raise ValueError("Keyring backend requested but no OS keychain is available")

    if preference == "keyring" or (preference == "auto" and keyring_available):
        logger.info(f"Session storage: OS keychain (service '{service_name}')")
        return KeyringStorageBackend(service_name)

    logger.warning(f"Session storage: unencrypted file at {file_path}")
    return FileStorageBackend(file_path)


class SecureSessionStore:
    """
    Key/value store for session credentials.

    Operations on the same key run in call order (last write wins);
    operations on different keys do not wait for each other.

    Examples:
        >>> store = SecureSessionStore(select_backend())
        >>> await store.set_item("auth_token", token)
        >>> await store.get_item("auth_token")
        >>> await store.delete_item("auth_token")
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend
        self._key_locks: Dict[str, asyncio.Lock] = {}

    @property
    def is_encrypted(self) -> bool:
        return self.backend.encrypted

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._key_locks.get(key)
        if lock is None:
            lock = self._key_locks[key] = asyncio.Lock()
        return lock

    async def set_item(self, key: str, value: str) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Raises:
            TypeError: If value is not a string
            StorageError: If the backend write fails
        """
        if not isinstance(value, str):
            raise TypeError(f"Value for '{key}' must be a string, got {type(value).__name__}")

        async with self._lock_for(key):
            try:
                await self.backend.set(key, value)
            except StorageError:
                logger.error(f"Failed to store '{key}' in {self.backend.name} storage")
                raise
            except Exception as e:
                logger.error(f"Failed to store '{key}' in {self.backend.name} storage: {e}")
                raise StorageError(key, "set", e) from e

    async def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under ``key``.

        Returns:
            The value, or None if the key was never written

        Raises:
            StorageError: If the backend read fails
        """
        async with self._lock_for(key):
            try:
                return await self.backend.get(key)
            except StorageError:
                logger.error(f"Failed to read '{key}' from {self.backend.name} storage")
                raise
            except Exception as e:
                logger.error(f"Failed to read '{key}' from {self.backend.name} storage: {e}")
                raise StorageError(key, "get", e) from e

    async def delete_item(self, key: str) -> None:
        """
        Delete ``key``. Deleting a missing key succeeds silently.

        Raises:
            StorageError: If the backend delete fails
        """
        async with self._lock_for(key):
            try:
                await self.backend.remove(key)
            except StorageError:
                logger.error(f"Failed to delete '{key}' from {self.backend.name} storage")
                raise
            except Exception as e:
                logger.error(f"Failed to delete '{key}' from {self.backend.name} storage: {e}")
                raise StorageError(key, "delete", e) from e


class SessionCredentials:
    """
    Auth token and user profile kept in the session store.

    Examples:
        >>> credentials = SessionCredentials(store)
        >>> await credentials.save(token, {"id": "42", "name": "Anna"})
        >>> token, user = await credentials.load()
    """

    TOKEN_KEY = "auth_token"
    USER_KEY = "auth_user"

    def __init__(self, store: SecureSessionStore):
        self.store = store

    async def save(self, token: str, user: Dict[str, Any]) -> None:
        """Persist the token and the user profile."""
        await asyncio.gather(
            self.store.set_item(self.TOKEN_KEY, token),
            self.store.set_item(self.USER_KEY, json.dumps(user, ensure_ascii=False)),
        )
        logger.info("Session credentials stored")

    async def load(self) -> Optional[Tuple[str, Dict[str, Any]]]:
        """
        Read back the stored session.

        Returns:
            (token, user) when both are present, None otherwise. A corrupt
            user profile clears the stored session.
        """
        token, raw_user = await asyncio.gather(
            self.store.get_item(self.TOKEN_KEY),
            self.store.get_item(self.USER_KEY),
        )
        if not token or not raw_user:
            return None

        try:
            user = json.loads(raw_user)
        except json.JSONDecodeError:
            logger.warning("Stored user profile is corrupt, clearing session")
            await self.clear()
            return None

        return token, user

    async def clear(self) -> None:
        """Remove the token and the user profile."""
        await asyncio.gather(
            self.store.delete_item(self.TOKEN_KEY),
            self.store.delete_item(self.USER_KEY),
        )
        logger.info("Session credentials cleared")
