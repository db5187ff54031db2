"""External blob store contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(slots=True, frozen=True)
class BlobRef:
    """Reference to an uploaded object."""

    file_id: str
    web_view_link: str


class BlobStore(Protocol):
    """
    Upload/download/delete keyed by an opaque external file id.

    Implementations raise ExternalStoreError (or a subclass) on failure and
    NotFoundError when the id is unknown.
    """

    def upload(
        self,
        data: bytes,
        name: str,
        mime_type: str,
        *,
        folder_id: Optional[str] = None,
    ) -> BlobRef: ...

    def download(self, file_id: str) -> bytes: ...

    def delete(self, file_id: str) -> None: ...
