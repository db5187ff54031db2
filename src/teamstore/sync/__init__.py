"""Public sync exports for teamstore."""

from __future__ import annotations

from .cache import JsonFileCache, LocalCache, MemoryCache
from .engine import (
    KEY_DATA,
    KEY_LAST_SYNC,
    KEY_PENDING,
    MAX_LOCAL_RECORDS,
    AnalyticsSync,
    SyncState,
    cache_key,
)
from .remote import RemoteAnalyticsStore
from .stats import compute_stats

__all__ = [
    "AnalyticsSync",
    "SyncState",
    "cache_key",
    "KEY_DATA",
    "KEY_LAST_SYNC",
    "KEY_PENDING",
    "MAX_LOCAL_RECORDS",
    "LocalCache",
    "MemoryCache",
    "JsonFileCache",
    "RemoteAnalyticsStore",
    "compute_stats",
]
