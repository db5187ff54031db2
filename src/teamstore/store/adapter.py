"""Permission-checked CRUD over the shared files and folders collections."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Optional, Sequence

from teamstore.errors import IndexUnavailableError, NotFoundError, ValidationError
from teamstore.models import ItemType, TeamFolderItem, Tier
from teamstore.permissions import has_capability, require_capability
from teamstore.storage.documents import validate_document_size
from teamstore.storage.tiers import DOCUMENT_LIMIT
from teamstore.util.time import now_utc

from .backend import DocumentBackend, Filter
from .codec import collection_for, document_to_item, item_to_document, name_field

logger = logging.getLogger(__name__)

_BOTH_TYPES: tuple[ItemType, ...] = (ItemType.FOLDER, ItemType.FILE)

# lastModifiedBy for rewrites no single user asked for (team membership changes).
SYSTEM_ACTOR: str = "system"

# Attributes callers may change through update(); the rest are immutable or
# maintained by the adapter itself.
_UPDATABLE: frozenset[str] = frozenset({
    "name",
    "parent_id",
    "folder_path",
    "permissions",
    "description",
    "file_type",
    "file_size",
    "content",
    "url",
    "drive_file_id",
    "version",
    "storage_type",
    "tags",
})


class DocumentStoreAdapter:
    """
    The only writer of item documents.

    Checked operations (list/get/create/update/delete) take the acting user and
    fail closed before touching storage. The unchecked helpers (find/fetch/put/
    remove/list_children/...) serve derived-field maintenance after the caller
    has already checked permissions.
    """

    def __init__(
        self,
        backend: DocumentBackend,
        *,
        document_limit: int = DOCUMENT_LIMIT,
    ) -> None:
        self._backend = backend
        self._document_limit = document_limit
        self._index_advisories: dict[str, Optional[str]] = {}

    @property
    def index_advisories(self) -> dict[str, Optional[str]]:
        """collection -> index creation link, for queries served unordered."""
        return dict(self._index_advisories)

    # ----------------------------
    # Checked operations
    # ----------------------------
    def list(
        self,
        team_id: str,
        parent_id: Optional[str],
        user_id: str,
        *,
        item_types: Sequence[ItemType] = _BOTH_TYPES,
    ) -> list[TeamFolderItem]:
        """
        Items directly under parent_id (None = root) that user_id can view.

        Folders come first, then files; each group by name (case-insensitive).
        Inline content is stripped from the listing.
        """
        items: list[TeamFolderItem] = []
        for item_type in item_types:
            for item in self._children(team_id, parent_id, item_type, ordered=True):
                if not has_capability(item, user_id, Tier.VIEW):
                    continue
                item.content = None
                items.append(item)

        items.sort(key=lambda i: (0 if i.is_folder else 1, i.name.casefold(), i.id))
        return items

    def get(
        self,
        item_id: str,
        user_id: str,
        item_type: Optional[ItemType] = None,
    ) -> TeamFolderItem:
        item = self.fetch(item_id, item_type)
        require_capability(item, user_id, Tier.VIEW)
        return item

    def create(self, item: TeamFolderItem, user_id: str) -> TeamFolderItem:
        """
        Persist a new item.

        When the item sits in an existing folder, user_id needs edit on that folder.
        """
        if not item.id:
            raise ValidationError("item id is required")
        if not item.team_id:
            raise ValidationError("teamId is required", details={"item_id": item.id})
        if self.find(item.id, item.item_type) is not None:
            raise ValidationError("Item already exists", details={"item_id": item.id})

        if item.parent_id:
            parent = self.find(item.parent_id, ItemType.FOLDER)
            if parent is not None:
                require_capability(parent, user_id, Tier.EDIT)

        now = now_utc()
        item.created_at = item.created_at or now
        item.last_modified = now
        item.last_modified_by = user_id
        self.put(item)
        logger.info("Created %s %s (%s) in team %s",
                    item.item_type.value, item.id, item.folder_path, item.team_id)
        return item

    def update(
        self,
        item_id: str,
        item_type: ItemType,
        user_id: str,
        changes: dict[str, Any],
        *,
        required: Tier = Tier.EDIT,
    ) -> TeamFolderItem:
        """
        Apply attribute changes after checking `required` on the stored item.

        lastModified/lastModifiedBy are always refreshed.
        """
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")

        current = self.fetch(item_id, item_type)
        require_capability(current, user_id, required)

        updated = dataclasses.replace(
            current,
            **changes,
            last_modified=now_utc(),
            last_modified_by=user_id,
        )
        self.put(updated)
        return updated

    def delete(self, item_id: str, item_type: ItemType, user_id: str) -> TeamFolderItem:
        """Delete after checking admin; returns the removed item."""
        current = self.fetch(item_id, item_type)
        require_capability(current, user_id, Tier.ADMIN)
        self.remove(current)
        return current

    # ----------------------------
    # Unchecked helpers
    # ----------------------------
    def find(self, item_id: str, item_type: Optional[ItemType] = None) -> Optional[TeamFolderItem]:
        if not item_id:
            return None
        for t in (item_type,) if item_type else (ItemType.FILE, ItemType.FOLDER):
            data = self._backend.get(collection_for(t), item_id)
            if data is not None:
                return document_to_item(item_id, data, t)
        return None

    def fetch(self, item_id: str, item_type: Optional[ItemType] = None) -> TeamFolderItem:
        item = self.find(item_id, item_type)
        if item is None:
            what = item_type.value.capitalize() if item_type else "Item"
            raise NotFoundError(f"{what} not found", details={"item_id": item_id})
        return item

    def put(self, item: TeamFolderItem) -> None:
        doc = item_to_document(item)
        validate_document_size(doc, self._document_limit)
        self._backend.set(collection_for(item.item_type), item.id, doc)

    def touch(self, item: TeamFolderItem, user_id: str) -> None:
        """put() that also stamps lastModified/lastModifiedBy."""
        item.last_modified = now_utc()
        item.last_modified_by = user_id
        self.put(item)

    def remove(self, item: TeamFolderItem) -> None:
        self._backend.delete(collection_for(item.item_type), item.id)

    def list_children(
        self,
        team_id: str,
        parent_id: Optional[str],
        item_types: Iterable[ItemType] = _BOTH_TYPES,
    ) -> list[TeamFolderItem]:
        out: list[TeamFolderItem] = []
        for item_type in item_types:
            out.extend(self._children(team_id, parent_id, item_type, ordered=False))
        return out

    def list_team_items(
        self,
        team_id: str,
        item_types: Iterable[ItemType] = _BOTH_TYPES,
    ) -> list[TeamFolderItem]:
        out: list[TeamFolderItem] = []
        for item_type in item_types:
            rows = self._backend.query(collection_for(item_type), [Filter("teamId", team_id)])
            out.extend(document_to_item(doc_id, data, item_type) for doc_id, data in rows)
        return out

    def find_folder_by_path(self, team_id: str, path: str) -> Optional[TeamFolderItem]:
        rows = self._backend.query(
            collection_for(ItemType.FOLDER),
            [Filter("teamId", team_id), Filter("folderPath", path)],
        )
        if not rows:
            return None
        doc_id, data = rows[0]
        return document_to_item(doc_id, data, ItemType.FOLDER)

    # ----------------------------
    # Internals
    # ----------------------------
    def _children(
        self,
        team_id: str,
        parent_id: Optional[str],
        item_type: ItemType,
        *,
        ordered: bool,
    ) -> list[TeamFolderItem]:
        collection = collection_for(item_type)
        filters = [Filter("teamId", team_id), Filter("parentId", parent_id)]

        if ordered:
            try:
                rows = self._backend.query(collection, filters, order_by=name_field(item_type))
            except IndexUnavailableError as exc:
                url = exc.details.get("remediation_url")
                if collection not in self._index_advisories:
                    logger.warning(
                        "Query on %s needs an index, serving unordered results. Create it at: %s",
                        collection, url,
                    )
                self._index_advisories[collection] = url
                rows = self._backend.query(collection, filters)
        else:
            rows = self._backend.query(collection, filters)

        return [document_to_item(doc_id, data, item_type) for doc_id, data in rows]
