"""Remote mirror of a user's performance records."""

from __future__ import annotations

import logging

from teamstore.models import PerformanceRecord
from teamstore.store.backend import ANALYTICS_COLLECTION, DocumentBackend, Filter

logger = logging.getLogger(__name__)


class RemoteAnalyticsStore:
    """Records live in one collection keyed by record id and tagged with userId."""

    def __init__(self, backend: DocumentBackend, collection: str = ANALYTICS_COLLECTION) -> None:
        self._backend = backend
        self._collection = collection

    def upsert(self, user_id: str, record: PerformanceRecord) -> None:
        doc = record.to_dict()
        doc["userId"] = user_id
        self._backend.set(self._collection, record.id, doc)

    def delete(self, user_id: str, record_id: str) -> None:
        data = self._backend.get(self._collection, record_id)
        if data is not None and data.get("userId") != user_id:
            logger.warning("Skipping remote delete of %s: owned by another user", record_id)
            return
        self._backend.delete(self._collection, record_id)

    def fetch_all(self, user_id: str) -> list[PerformanceRecord]:
        """All of user_id's records, newest first."""
        rows = self._backend.query(self._collection, [Filter("userId", user_id)])
        records: list[PerformanceRecord] = []
        for doc_id, data in rows:
            data = {k: v for k, v in data.items() if k != "userId"}
            data.setdefault("id", doc_id)
            try:
                records.append(PerformanceRecord.from_dict(data))
            except ValueError as exc:
                logger.warning("Skipping malformed remote record %s: %s", doc_id, exc)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    def clear(self, user_id: str) -> int:
        rows = self._backend.query(self._collection, [Filter("userId", user_id)])
        for doc_id, _ in rows:
            self._backend.delete(self._collection, doc_id)
        return len(rows)
