"""Data model for shared files and folders."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .permissions import Permissions


class ItemType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class StorageType(str, Enum):
    """Where a file's content actually lives."""

    FIRESTORE = "firestore"
    DRIVE = "drive"
    URL = "url"


@dataclass(slots=True)
class TeamFolderItem:
    """
    A file or folder in a team's tree.

    Notes:
        - parent_id None means the item sits at the root of the team tree.
        - folder_path is the folder's own path for folders, and the path of the
          containing folder for files ("/" at root).
        - For files exactly one of content / url / drive_file_id is the source of
          the payload, selected by storage_type.
    """

    id: str
    name: str
    item_type: ItemType
    team_id: str
    permissions: Permissions
    created_by: str

    parent_id: Optional[str] = None
    folder_path: str = "/"
    created_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    last_modified_by: Optional[str] = None
    description: str = ""

    # File-only fields.
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    content: Optional[str] = None
    url: Optional[str] = None
    drive_file_id: Optional[str] = None
    version: Optional[int] = None
    storage_type: Optional[StorageType] = None
    tags: list[str] = field(default_factory=list)

    @property
    def is_folder(self) -> bool:
        return self.item_type is ItemType.FOLDER

    @property
    def is_file(self) -> bool:
        return self.item_type is ItemType.FILE


@dataclass(slots=True, frozen=True)
class Breadcrumb:
    """One entry of the ancestor chain; the synthetic root has id None."""

    id: Optional[str]
    name: str
    path: str
