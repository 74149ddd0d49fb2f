"""
Unencrypted JSON file storage backend.

Available everywhere, including sandboxes without an OS keychain. Values
are stored in plain text; there is no confidentiality guarantee.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from .interfaces import StorageBackend, StorageError


logger = logging.getLogger(__name__)


class FileStorageBackend(StorageBackend):
    """
    Key/value pairs kept in one JSON document on disk.

    Every write goes to a temporary file in the same directory which is
    then moved over the original, so readers never see a half-written
    document.

    Examples:
        >>> backend = FileStorageBackend(Path("output/session_store.json"))
        >>> await backend.set("auth_token", "abc")
        >>> await backend.get("auth_token")
        'abc'
    """

    name = "file"
    encrypted = False

    def __init__(self, filepath: Path):
        self.filepath = Path(filepath)
        # serializes read-modify-write cycles running in worker threads
        self._file_lock = threading.Lock()

    async def get(self, key: str) -> Optional[str]:
        try:
            data = await asyncio.to_thread(self._read_locked)
        except (OSError, ValueError) as e:
            raise StorageError(key, "get", e) from e
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._update, key, value)
        except (OSError, ValueError, TypeError) as e:
            raise StorageError(key, "set", e) from e
        logger.debug(f"Stored key '{key}' in {self.filepath}")

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._update, key, None)
        except (OSError, ValueError) as e:
            raise StorageError(key, "delete", e) from e
        logger.debug(f"Removed key '{key}' from {self.filepath}")

    def _read_locked(self) -> Dict[str, str]:
        with self._file_lock:
            return self._read()

    def _read(self) -> Dict[str, str]:
        if not self.filepath.exists():
            return {}

        with open(self.filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Unexpected storage document in {self.filepath}")
        return data

    def _update(self, key: str, value: Optional[str]):
        with self._file_lock:
            data = self._read()

            if value is None:
                if key not in data:
                    return
                del data[key]
            else:
                data[key] = value

            self._write(data)

    def _write(self, data: Dict[str, str]):
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=self.filepath.parent,
            prefix=f".{self.filepath.name}.",
            suffix=".tmp"
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.filepath)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
