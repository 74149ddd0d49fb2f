"""
Abstract storage backend interface.

The session store depends on this abstraction only. Concrete backends are
chosen once at startup and injected, so tests can hand in an in-memory
fake.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """
    Raised when a backend read, write or delete fails.

    Attributes:
        key: Key the failed operation was addressing
        operation: "get", "set" or "delete"
        cause: Underlying exception, if any
    """

    def __init__(self, key: str, operation: str, cause: Optional[BaseException] = None):
        self.key = key
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Storage {operation} failed for key '{key}'{detail}")


class StorageBackend(ABC):
    """
    Asynchronous key/value persistence.

    Implementations must:
    - return None from get() for keys never written
    - treat remove() of a missing key as success
    - replace existing values atomically in set()
    - raise StorageError for any other failure
    """

    #: Short identifier used in logs and configuration
    name: str = "abstract"

    #: Whether values are encrypted at rest
    encrypted: bool = False

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``; a missing key is not an error."""
        pass
