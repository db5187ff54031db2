"""Document backend contract shared by the Firestore and in-memory backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

FILES_COLLECTION: str = "sharedFiles"
FOLDERS_COLLECTION: str = "sharedFolders"
TEAMS_COLLECTION: str = "teams"
ANALYTICS_COLLECTION: str = "interview_analytics"


@dataclass(slots=True, frozen=True)
class Filter:
    """Equality filter; `value` may be None to match documents storing null."""

    field: str
    value: Any
    op: str = "=="


class DocumentBackend(Protocol):
    """
    Minimal document store.

    Notes:
        - Documents are plain dicts; ids live outside the document body.
        - query() with order_by may raise IndexUnavailableError when the store
          needs a composite index for the filter/order combination.
    """

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]: ...

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
    ) -> list[tuple[str, dict[str, Any]]]: ...
