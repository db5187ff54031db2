"""In-memory document backend (tests, local development)."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from teamstore.errors import IndexUnavailableError, NotFoundError, ValidationError

from .backend import Filter

_INDEX_URL = "https://console.firebase.google.com/project/_/firestore/indexes?create_composite={collection}"


@dataclass(slots=True)
class InMemoryBackend:
    """
    Dict-of-dicts document store.

    Indexes:
        - docs_by_collection: collection -> doc_id -> document

    Collections listed in `unindexed_collections` reject filtered queries that
    also ask for an order, the way a document store without the composite index
    does.
    """

    docs_by_collection: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    unindexed_collections: set[str] = field(default_factory=set)

    def clone(self) -> InMemoryBackend:
        """Deep-clone this backend."""
        return InMemoryBackend(
            docs_by_collection=copy.deepcopy(self.docs_by_collection),
            unindexed_collections=set(self.unindexed_collections),
        )

    # ----------------------------
    # DocumentBackend
    # ----------------------------
    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self.docs_by_collection.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        if not doc_id:
            raise ValidationError("doc_id must be a non-empty string")
        self.docs_by_collection.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None:
        docs = self.docs_by_collection.get(collection, {})
        if doc_id not in docs:
            raise NotFoundError(
                f"Document not found: {collection}/{doc_id}",
                details={"collection": collection, "doc_id": doc_id},
            )
        docs[doc_id].update(copy.deepcopy(changes))

    def delete(self, collection: str, doc_id: str) -> None:
        self.docs_by_collection.get(collection, {}).pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
    ) -> list[tuple[str, dict[str, Any]]]:
        if order_by and filters and collection in self.unindexed_collections:
            raise IndexUnavailableError(
                "The query requires an index",
                details={
                    "collection": collection,
                    "remediation_url": _INDEX_URL.format(collection=collection),
                },
            )

        out: list[tuple[str, dict[str, Any]]] = []
        for doc_id, doc in self.docs_by_collection.get(collection, {}).items():
            if all(_matches(doc, f) for f in filters):
                out.append((doc_id, copy.deepcopy(doc)))

        if order_by:
            # Documents without the order field are excluded, as in Firestore.
            out = [(i, d) for i, d in out if d.get(order_by) is not None]
            out.sort(key=lambda pair: pair[1][order_by])
        return out


def _matches(doc: dict[str, Any], flt: Filter) -> bool:
    if flt.op != "==":
        raise ValidationError(f"Unsupported filter operator: {flt.op}")
    if flt.field not in doc:
        return False
    return doc[flt.field] == flt.value
