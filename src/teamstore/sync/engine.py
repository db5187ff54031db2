"""AnalyticsSync: local-first replication of performance records."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Optional, Union

from teamstore.config import StoreSettings
from teamstore.errors import InvalidStateError, TeamStoreError
from teamstore.models import (
    AnalyticsStats,
    PerformanceRecord,
    StorageStatus,
    SyncResult,
    migrate_legacy_flags,
)
from teamstore.store.backend import DocumentBackend
from teamstore.util.time import from_wire, now_utc, to_rfc3339

from .cache import JsonFileCache, LocalCache
from .remote import RemoteAnalyticsStore
from .stats import compute_stats

logger = logging.getLogger(__name__)

KEY_DATA: str = "interview_analytics_data"
KEY_LAST_SYNC: str = "analytics_last_sync"
KEY_PENDING: str = "analytics_pending_sync"

MAX_LOCAL_RECORDS: int = 100
DEFAULT_INTERVAL_SECONDS: float = 300.0
DEFAULT_STALE_AFTER_SECONDS: float = 3600.0

ACTION_UPSERT: str = "upsert"
ACTION_DELETE: str = "delete"


def cache_key(base: str, user_id: Optional[str]) -> str:
    """Per-user cache key. The bare key holds what was saved while signed out."""
    return base if user_id is None else f"{base}:{user_id}"


class SyncState(str, Enum):
    LOCAL_ONLY = "local-only"
    SYNCING = "syncing"
    SYNCED = "synced"


Listener = Callable[[SyncState], None]


class AnalyticsSync:
    """
    Mirrors a user's performance records between a local cache and a remote store.

    State machine:
        - LOCAL_ONLY: no user, or offline. Writes still land locally and queue.
        - SYNCING: user + online; a cycle is running or the last one failed.
        - SYNCED: user + online; the last cycle pushed and pulled everything.

    Policy:
        - Every save/delete hits the local cache first and returns without
          touching the remote side; a background worker flushes the queue.
        - Local data and queued ops are kept per user. Records saved while
          signed out are adopted by the next user who signs in.
        - A cycle pushes queued ops, pushes local records missing remotely, then
          pulls. Remote wins by record id, except for records with queued local ops.
        - Sign-out and offline stop the periodic loop; queued ops are kept.

    Locking:
        - `_lock` guards user/online/state and every cache read-modify-write.
        - `_cycle_lock` serializes remote round trips. Remote calls never run
          while `_lock` is held.
    """

    def __init__(
        self,
        cache: LocalCache,
        remote: RemoteAnalyticsStore,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._remote = remote
        self._interval = interval_seconds
        self._stale_after = timedelta(seconds=stale_after_seconds)
        self._clock = clock

        self._lock = threading.RLock()
        self._cycle_lock = threading.Lock()
        self._user_id: Optional[str] = None
        self._online = True
        self._state = SyncState.LOCAL_ONLY
        self._listeners: list[Listener] = []

        self._timer: Optional[threading.Timer] = None
        self._running = False
        self._generation = 0

        self._worker: Optional[threading.Thread] = None
        self._work_requested = False
        self._pull_requested = False

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        backend: DocumentBackend,
        cache: Optional[LocalCache] = None,
    ) -> AnalyticsSync:
        """Engine over `backend` with a JSON file cache at settings.local_cache_path."""
        return cls(
            cache if cache is not None else JsonFileCache(settings.local_cache_path),
            RemoteAnalyticsStore(backend),
            interval_seconds=settings.sync_interval_seconds,
            stale_after_seconds=settings.sync_stale_after_seconds,
        )

    # ----------------------------
    # State
    # ----------------------------
    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def stale_after_seconds(self) -> float:
        return self._stale_after.total_seconds()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_user(self, user_id: Optional[str]) -> None:
        """Auth state change. None means signed out."""
        with self._lock:
            previous = self._user_id
            self._user_id = user_id or None

            if self._user_id is None:
                self.stop()
                self._set_state(SyncState.LOCAL_ONLY)
                return
            if previous == self._user_id:
                return

            self.stop()
            adopted = self._adopt_anonymous(self._user_id)
            if adopted:
                logger.info("Adopted %d signed-out records for %s", adopted, self._user_id)

            if self._online:
                self._set_state(SyncState.SYNCING)
                self._request_cycle(pull=True)
                self.start()
            else:
                self._set_state(SyncState.LOCAL_ONLY)

    def set_online(self, online: bool) -> None:
        """Network state change."""
        with self._lock:
            was_online = self._online
            self._online = bool(online)

            if not self._online:
                self.stop()
                self._set_state(SyncState.LOCAL_ONLY)
                return

            if not was_online and self._user_id is not None:
                self._set_state(SyncState.SYNCING)
                self._request_cycle(pull=True)
                self.start()

    # ----------------------------
    # Records
    # ----------------------------
    def save(self, record: Union[PerformanceRecord, dict[str, Any]]) -> PerformanceRecord:
        """Write locally and queue the remote mirror."""
        if isinstance(record, dict):
            record = PerformanceRecord.from_dict(record)

        with self._lock:
            user_id = self._user_id
            records = [r for r in self._load_local(user_id) if r.id != record.id]
            records.append(record)
            self._store_local(user_id, records)
            self._enqueue(user_id, ACTION_UPSERT, record.id, record.to_dict())

            if self._can_sync():
                self._request_cycle(pull=False)
        return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            user_id = self._user_id
            records = self._load_local(user_id)
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                return False
            self._store_local(user_id, remaining)
            self._enqueue(user_id, ACTION_DELETE, record_id, None)

            if self._can_sync():
                self._request_cycle(pull=False)
        return True

    def history(self) -> list[PerformanceRecord]:
        """The current user's local records, newest first."""
        with self._lock:
            return self._load_local(self._user_id)

    def get(self, record_id: str) -> Optional[PerformanceRecord]:
        for record in self.history():
            if record.id == record_id:
                return record
        return None

    def clear_all(self) -> None:
        """Drop the current user's local data; also clear the remote copy when online."""
        with self._lock:
            user_id = self._user_id
            self._cache.remove(cache_key(KEY_DATA, user_id))
            self._cache.remove(cache_key(KEY_PENDING, user_id))
            can_sync = self._can_sync()

        if not can_sync:
            return
        with self._cycle_lock:
            try:
                removed = self._remote.clear(user_id)
                logger.info("Cleared %d remote records for %s", removed, user_id)
            except TeamStoreError as exc:
                logger.warning("Failed to clear remote records: %s", exc)

    # ----------------------------
    # Sync
    # ----------------------------
    def sync_now(self) -> SyncResult:
        """Run one push + pull cycle on the calling thread."""
        with self._cycle_lock:
            with self._lock:
                if not self._can_sync():
                    return SyncResult(
                        success=False,
                        message="Sync requires a signed-in user and a network connection",
                    )
                user_id = self._user_id
                self._set_state(SyncState.SYNCING)

            push = self._flush_pending(user_id)
            pull = self._pull(user_id)
            success = push.success and pull.success

            with self._lock:
                if success:
                    self._cache.set(cache_key(KEY_LAST_SYNC, user_id), to_rfc3339(self._clock()))
                    if self._can_sync() and self._user_id == user_id:
                        self._set_state(SyncState.SYNCED)

        result = SyncResult(
            success=success,
            message="Sync completed" if success else "Sync incomplete, will retry",
            synced=push.synced + pull.synced,
            errors=push.errors + pull.errors,
        )
        logger.info("Sync for %s: %s (%d records, %d errors)",
                    user_id, result.message, result.synced, len(result.errors))
        return result

    def run_periodic_sync(self) -> Optional[SyncResult]:
        if not self._can_sync():
            return None
        return self.sync_now()

    def start(self) -> None:
        """Start the periodic sync loop."""
        with self._lock:
            if self._user_id is None:
                raise InvalidStateError("Cannot start sync without a signed-in user")
            if self._running:
                return
            self._running = True
            self._generation += 1
            self._schedule(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def close(self) -> None:
        """Stop the loop, wait for the background flush, and drop all listeners."""
        self.stop()
        self.wait_for_idle()
        self._listeners.clear()

    def wait_for_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until queued background work is done. Returns False on timeout."""
        with self._lock:
            worker = self._worker
        if worker is None or worker is threading.current_thread():
            return True
        worker.join(timeout)
        return not worker.is_alive()

    @property
    def is_running(self) -> bool:
        return self._running

    # ----------------------------
    # Reporting
    # ----------------------------
    def status(self) -> StorageStatus:
        with self._lock:
            user_id = self._user_id
            last_sync = from_wire(self._cache.get(cache_key(KEY_LAST_SYNC, user_id)))
            needs_sync = user_id is not None and (
                last_sync is None or self._clock() - last_sync > self._stale_after
            )
            return StorageStatus(
                is_online=self._online,
                is_authenticated=user_id is not None,
                last_sync=to_rfc3339(last_sync) if last_sync else None,
                needs_sync=needs_sync,
                pending_operations=len(self._pending(user_id)),
                state=self._state.value,
            )

    def stats(self) -> AnalyticsStats:
        return compute_stats(self.history())

    def export_data(self) -> str:
        """JSON export of status, statistics and the full local history."""
        status = self.status()
        stats = self.stats()
        payload = {
            "exportedAt": to_rfc3339(self._clock()),
            "userId": self._user_id or "anonymous",
            "storageStatus": {
                "isOnline": status.is_online,
                "isAuthenticated": status.is_authenticated,
                "lastSync": status.last_sync,
                "needsSync": status.needs_sync,
                "pendingOperations": status.pending_operations,
            },
            "statistics": {
                "totalInterviews": stats.total_interviews,
                "averageScore": stats.average_score,
                "lastInterviewDate": stats.last_interview_date,
                "improvementTrend": stats.improvement_trend,
            },
            "interviews": [r.to_dict() for r in self.history()],
        }
        return json.dumps(payload, indent=2)

    # ----------------------------
    # Background work
    # ----------------------------
    def _request_cycle(self, pull: bool) -> None:
        with self._lock:
            self._work_requested = True
            self._pull_requested = self._pull_requested or pull
            if self._worker is not None:
                return
            worker = threading.Thread(target=self._drain, name="teamstore-sync", daemon=True)
            self._worker = worker
        worker.start()

    def _drain(self) -> None:
        try:
            while True:
                with self._lock:
                    if not self._work_requested or not self._can_sync():
                        self._work_requested = False
                        self._pull_requested = False
                        self._worker = None
                        return
                    pull = self._pull_requested
                    self._work_requested = False
                    self._pull_requested = False

                if pull:
                    self.sync_now()
                else:
                    self._push()
        except BaseException:
            with self._lock:
                self._worker = None
            raise

    def _push(self) -> SyncResult:
        with self._cycle_lock:
            with self._lock:
                if not self._can_sync():
                    return SyncResult(success=False, message="Not connected")
                user_id = self._user_id
            return self._flush_pending(user_id)

    def _schedule(self, generation: int) -> None:
        timer = threading.Timer(self._interval, self._tick, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                return
        self.run_periodic_sync()
        with self._lock:
            if self._running and generation == self._generation:
                self._schedule(generation)

    # ----------------------------
    # Internals
    # ----------------------------
    def _can_sync(self) -> bool:
        return self._user_id is not None and self._online

    def _set_state(self, state: SyncState) -> None:
        if state is self._state:
            return
        logger.debug("Sync state %s -> %s", self._state.value, state.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _adopt_anonymous(self, user_id: str) -> int:
        anonymous = self._load_local(None)
        if not anonymous:
            return 0

        own = {r.id: r for r in self._load_local(user_id)}
        adopted = 0
        for record in anonymous:
            if record.id in own:
                continue
            own[record.id] = record
            self._enqueue(user_id, ACTION_UPSERT, record.id, record.to_dict())
            adopted += 1

        self._store_local(user_id, list(own.values()))
        self._cache.remove(cache_key(KEY_DATA, None))
        self._cache.remove(cache_key(KEY_PENDING, None))
        return adopted

    def _load_local(self, user_id: Optional[str]) -> list[PerformanceRecord]:
        raw = self._cache.get(cache_key(KEY_DATA, user_id), [])
        records: list[PerformanceRecord] = []
        migrated = False
        for entry in raw if isinstance(raw, list) else []:
            if not isinstance(entry, dict):
                continue
            try:
                record = PerformanceRecord.from_dict(entry)
            except ValueError as exc:
                logger.warning("Dropping malformed local record: %s", exc)
                continue
            migrated = migrate_legacy_flags(record) or migrated
            records.append(record)

        records.sort(key=lambda r: r.timestamp, reverse=True)
        if migrated:
            self._store_local(user_id, records)
        return records

    def _store_local(self, user_id: Optional[str], records: list[PerformanceRecord]) -> None:
        newest = sorted(records, key=lambda r: r.timestamp, reverse=True)[:MAX_LOCAL_RECORDS]
        self._cache.set(cache_key(KEY_DATA, user_id), [r.to_dict() for r in newest])

    def _pending(self, user_id: Optional[str]) -> list[dict[str, Any]]:
        raw = self._cache.get(cache_key(KEY_PENDING, user_id), [])
        return [op for op in raw if isinstance(op, dict)] if isinstance(raw, list) else []

    def _enqueue(
        self,
        user_id: Optional[str],
        action: str,
        record_id: str,
        record: Optional[dict[str, Any]],
    ) -> None:
        # Only the latest op per record matters.
        ops = [op for op in self._pending(user_id) if op.get("id") != record_id]
        ops.append({"action": action, "id": record_id, "record": record})
        self._cache.set(cache_key(KEY_PENDING, user_id), ops)

    def _drop_ops(self, user_id: str, done: list[dict[str, Any]]) -> None:
        # An op replaced while its push was in flight compares unequal and stays queued.
        ops = [op for op in self._pending(user_id) if op not in done]
        self._cache.set(cache_key(KEY_PENDING, user_id), ops)

    def _flush_pending(self, user_id: str) -> SyncResult:
        with self._lock:
            ops = self._pending(user_id)

        done: list[dict[str, Any]] = []
        errors: list[str] = []
        for op in ops:
            try:
                if op.get("action") == ACTION_DELETE:
                    self._remote.delete(user_id, op["id"])
                else:
                    self._remote.upsert(user_id, PerformanceRecord.from_dict(op["record"]))
                done.append(op)
            except TeamStoreError as exc:
                logger.warning("Remote %s of %s failed, queued for retry: %s",
                               op.get("action"), op.get("id"), exc)
                errors.append(f"{op.get('id')}: {exc}")

        with self._lock:
            self._drop_ops(user_id, done)
        return SyncResult(
            success=not errors,
            message=f"Pushed {len(done)} of {len(ops)} queued operations",
            synced=len(done),
            errors=errors,
        )

    def _pull(self, user_id: str) -> SyncResult:
        try:
            remote_records = self._remote.fetch_all(user_id)
        except TeamStoreError as exc:
            logger.warning("Fetching remote records failed: %s", exc)
            return SyncResult(success=False, message="Pull failed", errors=[str(exc)])

        remote_ids = {r.id for r in remote_records}
        with self._lock:
            pending_ids = {op.get("id") for op in self._pending(user_id)}
            # Local-only records that never reached the remote store.
            unsent = [
                r for r in self._load_local(user_id)
                if r.id not in remote_ids and r.id not in pending_ids
            ]

        errors: list[str] = []
        pushed = 0
        for record in unsent:
            try:
                self._remote.upsert(user_id, record)
                pushed += 1
            except TeamStoreError as exc:
                logger.warning("Pushing local record %s failed, queued for retry: %s",
                               record.id, exc)
                errors.append(f"{record.id}: {exc}")
                with self._lock:
                    if all(op.get("id") != record.id for op in self._pending(user_id)):
                        self._enqueue(user_id, ACTION_UPSERT, record.id, record.to_dict())

        with self._lock:
            pending_ids = {op.get("id") for op in self._pending(user_id)}
            merged: dict[str, PerformanceRecord] = {}
            for record in remote_records:
                if record.id in pending_ids:
                    continue
                migrate_legacy_flags(record)
                merged[record.id] = record
            for record in self._load_local(user_id):
                merged.setdefault(record.id, record)
            self._store_local(user_id, list(merged.values()))

        return SyncResult(
            success=not errors,
            message=f"Pulled {len(remote_records)} records",
            synced=len(remote_records) + pushed,
            errors=errors,
        )
