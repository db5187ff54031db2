"""Cloud Firestore document backend."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional, Sequence, TypeVar

from teamstore.auth import AuthInfo, CredentialsProvider
from teamstore.errors import (
    AccessDeniedError,
    ExternalStoreError,
    IndexUnavailableError,
    NotFoundError,
    TeamStoreError,
)

from .backend import Filter

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INDEX_URL_RE = re.compile(r"https://\S+")


class FirestoreBackend:
    """
    DocumentBackend over google-cloud-firestore.

    Notes:
        - The Firestore client object is NOT exposed.
        - Queries are streamed and materialized so index errors surface inside
          query() rather than while the caller iterates.
    """

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        project: Optional[str] = None,
        database: str = "(default)",
    ) -> None:
        self._client = CredentialsProvider(auth_info).build_firestore_client(
            project,
            database=database,
        )

    @classmethod
    def from_client(cls, client: Any) -> FirestoreBackend:
        """Create backend from a pre-built firestore.Client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._client = client
        return obj

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        snap = self._call(lambda: self._client.collection(collection).document(doc_id).get())
        if not snap.exists:
            return None
        return snap.to_dict() or {}

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._call(lambda: self._client.collection(collection).document(doc_id).set(data))

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        self._call(lambda: self._client.collection(collection).document(doc_id).update(changes))

    def delete(self, collection: str, doc_id: str) -> None:
        self._call(lambda: self._client.collection(collection).document(doc_id).delete())

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        q = self._client.collection(collection)
        for flt in filters:
            q = q.where(filter=FieldFilter(flt.field, flt.op, flt.value))
        if order_by:
            q = q.order_by(order_by)

        logger.debug("Firestore query %s filters=%s order_by=%s", collection, filters, order_by)
        return self._call(lambda: [(snap.id, snap.to_dict() or {}) for snap in q.stream()])

    # ----------------------------
    # Internals
    # ----------------------------
    def _call(self, func: Callable[[], T]) -> T:
        try:
            return func()
        except TeamStoreError:
            raise
        except Exception as exc:
            raise _map_exception(exc) from exc


def _map_exception(exc: Exception) -> TeamStoreError:
    from google.api_core import exceptions as gexc

    message = str(exc)
    if isinstance(exc, gexc.FailedPrecondition) and "requires an index" in message:
        match = _INDEX_URL_RE.search(message)
        return IndexUnavailableError(
            "The query requires an index",
            details={"remediation_url": match.group(0) if match else None},
            cause=exc,
        )
    if isinstance(exc, gexc.NotFound):
        return NotFoundError("Document not found", cause=exc)
    if isinstance(exc, gexc.PermissionDenied):
        return AccessDeniedError("Document store denied access", cause=exc)
    return ExternalStoreError("Document store error", details={"message": message}, cause=exc)
