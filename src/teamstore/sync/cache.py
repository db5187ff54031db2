"""Key-value local caches holding JSON-serializable values."""

from __future__ import annotations

import copy
import json
import os
import threading
from typing import Any, Optional, Protocol

from teamstore.errors import TeamStoreError


class LocalCache(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryCache:
    """Process-local cache; values are deep-copied in and out."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._data.get(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileCache:
    """
    Cache persisted as a single JSON object on disk.

    Every set/remove rewrites the file through a temporary file and os.replace,
    so a crash leaves either the old or the new content.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._data = self._load()

    @property
    def path(self) -> str:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._data.get(key, default))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()

    def _load(self) -> dict[str, Any]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise TeamStoreError(
                "Failed to read local cache",
                details={"path": self._path},
                cause=exc,
            ) from exc
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        cache_dir = os.path.dirname(self._path)
        if cache_dir:
            os.makedirs(cache_dir, exist_ok=True)

        tmp_path = f"{self._path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise TeamStoreError(
                "Failed to write local cache",
                details={"path": self._path},
                cause=exc,
            ) from exc
