"""
Session credential storage.
"""

from .file_backend import FileStorageBackend
from .interfaces import StorageBackend, StorageError
from .keyring_backend import KeyringStorageBackend
from .secure_store import SecureSessionStore, SessionCredentials, select_backend

__all__ = [
    "FileStorageBackend",
    "KeyringStorageBackend",
    "SecureSessionStore",
    "SessionCredentials",
    "StorageBackend",
    "StorageError",
    "select_backend",
]
