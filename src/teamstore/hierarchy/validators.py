"""Strict validation helpers for tree edits."""

from __future__ import annotations

from typing import Iterable, Optional

from teamstore.errors import ValidationError
from teamstore.models import TeamFolderItem, Tier
from teamstore.permissions import require_capability
from teamstore.store import DocumentStoreAdapter

from .paths import is_same_or_descendant


def validate_same_team(item: TeamFolderItem, team_id: str) -> None:
    if item.team_id != team_id:
        raise ValidationError(
            f"{item.item_type.value.capitalize()} does not belong to team {team_id}",
            details={"item_id": item.id, "team_id": team_id},
        )


def validate_move_no_cycle(folder: TeamFolderItem, target: Optional[TeamFolderItem]) -> None:
    """
    Reject placing a folder under itself or its own subtree.

    The target's stored path is compared against the folder's path prefix.
    """
    if target is None or not folder.is_folder:
        return
    if target.id == folder.id:
        raise ValidationError("Cannot move a folder into itself", details={"item_id": folder.id})
    if is_same_or_descendant(target.folder_path, folder.folder_path):
        raise ValidationError(
            "Cannot move a folder into its own subfolder",
            details={"item_id": folder.id, "target_id": target.id},
        )


def validate_unique_folder_path(
    adapter: DocumentStoreAdapter,
    team_id: str,
    path: str,
    exclude_id: Optional[str] = None,
) -> None:
    existing = adapter.find_folder_by_path(team_id, path)
    if existing is not None and existing.id != exclude_id:
        raise ValidationError(
            f"A folder already exists at {path}",
            details={"team_id": team_id, "path": path, "existing_id": existing.id},
        )


def validate_subtree_capability(
    items: Iterable[TeamFolderItem],
    user_id: str,
    tier: Tier,
) -> None:
    """Raise on the first item user_id lacks `tier` on, before anything is written."""
    for item in items:
        require_capability(item, user_id, tier)
