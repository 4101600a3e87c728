"""
Local cache implementations.

JsonFileCache keeps every key in a single JSON object on disk, written
atomically (temp file + rename) so a crash never leaves a half-written
cache behind. InMemoryCache is used when no cache path is configured
and in tests.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from src.services.storage.interface import (
    LocalCacheInterface,
    StorageReadError,
    StorageWriteError,
)


class JsonFileCache(LocalCacheInterface):
    """Key-value cache backed by one JSON file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageReadError(f"Failed to read cache {self._path}: {e}")
        if not isinstance(data, dict):
            raise StorageReadError(f"Cache {self._path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError as e:
            raise StorageWriteError(f"Failed to write cache {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageReadError:
            # A corrupt cache is replaced rather than blocking every write
            data = {}
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        try:
            data = self._read_all()
        except StorageReadError:
            return
        if data.pop(key, None) is not None:
            self._write_all(data)


class InMemoryCache(LocalCacheInterface):
    """Process-local cache. Contents are lost on exit."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
