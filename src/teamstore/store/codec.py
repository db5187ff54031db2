"""Conversion between stored documents and TeamFolderItem."""

from __future__ import annotations

from typing import Any, Optional

from teamstore.models import ItemType, Permissions, StorageType, TeamFolderItem
from teamstore.storage.documents import compact
from teamstore.util.time import from_wire

from .backend import FILES_COLLECTION, FOLDERS_COLLECTION


def collection_for(item_type: ItemType) -> str:
    return FOLDERS_COLLECTION if item_type is ItemType.FOLDER else FILES_COLLECTION


def name_field(item_type: ItemType) -> str:
    return "folderName" if item_type is ItemType.FOLDER else "fileName"


def item_to_document(item: TeamFolderItem) -> dict[str, Any]:
    """Encode an item as a document body (None fields dropped, parentId kept)."""
    doc: dict[str, Any] = {
        "id": item.id,
        "teamId": item.team_id,
        "parentId": item.parent_id,
        "folderPath": item.folder_path,
        "permissions": item.permissions.to_dict(),
        "description": item.description,
        "lastModified": item.last_modified,
        "lastModifiedBy": item.last_modified_by,
    }

    if item.is_folder:
        doc.update({
            "folderName": item.name,
            "createdBy": item.created_by,
            "createdAt": item.created_at,
        })
        return compact(doc)

    doc.update({
        "itemType": ItemType.FILE.value,
        "fileName": item.name,
        "fileType": item.file_type,
        "fileSize": item.file_size,
        "content": item.content,
        "url": item.url,
        "driveFileId": item.drive_file_id,
        "sharedBy": item.created_by,
        "sharedAt": item.created_at,
        "tags": list(item.tags),
        "version": item.version,
        "storageType": item.storage_type.value if item.storage_type else None,
    })
    return compact(doc)


def document_to_item(doc_id: str, data: dict[str, Any], item_type: ItemType) -> TeamFolderItem:
    """
    Decode a stored document.

    Timestamps may come back as datetimes, RFC3339 strings or epoch millis; all
    are normalized to tz-aware UTC.
    """
    if item_type is ItemType.FOLDER:
        return TeamFolderItem(
            id=doc_id,
            name=str(data.get("folderName") or ""),
            item_type=ItemType.FOLDER,
            team_id=str(data.get("teamId") or ""),
            permissions=Permissions.from_dict(data.get("permissions")),
            created_by=str(data.get("createdBy") or ""),
            parent_id=data.get("parentId"),
            folder_path=data.get("folderPath") or "/",
            created_at=from_wire(data.get("createdAt")),
            last_modified=from_wire(data.get("lastModified")),
            last_modified_by=data.get("lastModifiedBy"),
            description=data.get("description") or "",
        )

    size = data.get("fileSize")
    version = data.get("version")
    return TeamFolderItem(
        id=doc_id,
        name=str(data.get("fileName") or ""),
        item_type=ItemType.FILE,
        team_id=str(data.get("teamId") or ""),
        permissions=Permissions.from_dict(data.get("permissions")),
        created_by=str(data.get("sharedBy") or ""),
        parent_id=data.get("parentId"),
        folder_path=data.get("folderPath") or "/",
        created_at=from_wire(data.get("sharedAt")),
        last_modified=from_wire(data.get("lastModified")),
        last_modified_by=data.get("lastModifiedBy"),
        description=data.get("description") or "",
        file_type=data.get("fileType"),
        file_size=int(size) if isinstance(size, (int, float)) else None,
        content=data.get("content"),
        url=data.get("url"),
        drive_file_id=data.get("driveFileId"),
        version=int(version) if isinstance(version, (int, float)) else 1,
        storage_type=_storage_type(data),
        tags=[t for t in data.get("tags") or [] if isinstance(t, str)],
    )


def _storage_type(data: dict[str, Any]) -> Optional[StorageType]:
    raw = data.get("storageType")
    try:
        return StorageType(raw)
    except ValueError:
        pass
    # Documents written before storageType existed.
    if data.get("driveFileId"):
        return StorageType.DRIVE
    if data.get("url") and not data.get("content"):
        return StorageType.URL
    return StorageType.FIRESTORE
