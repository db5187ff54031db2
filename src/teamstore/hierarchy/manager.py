"""HierarchyManager: paths, breadcrumbs, moves and subtree walks."""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional

from teamstore.models import Breadcrumb, ItemType, TeamFolderItem, Tier
from teamstore.permissions import require_capability
from teamstore.store import DocumentStoreAdapter

from .paths import ROOT_PATH, compute_path, path_prefixes, validate_name
from .validators import validate_move_no_cycle, validate_unique_folder_path

logger = logging.getLogger(__name__)

ROOT_BREADCRUMB_NAME: str = "Team Files"


class HierarchyManager:
    """
    Derives folderPath and breadcrumbs, and performs move/rename.

    It never owns storage: every read and write goes through the adapter.
    Folder moves and renames recompute the stored paths of all descendants.
    """

    def __init__(self, adapter: DocumentStoreAdapter) -> None:
        self._adapter = adapter

    # ----------------------------
    # Paths
    # ----------------------------
    def build_path(self, team_id: str, parent_id: Optional[str], name: Optional[str] = None) -> str:
        """
        Path for `name` under parent_id, or the parent's own path without a name.

        An unknown parent (or one from another team) counts as root.
        """
        parent = self.resolve_parent(team_id, parent_id)
        parent_path = parent.folder_path if parent else ROOT_PATH
        if name is None:
            return parent_path
        return compute_path(parent_path, name)

    def resolve_parent(self, team_id: str, parent_id: Optional[str]) -> Optional[TeamFolderItem]:
        if not parent_id:
            return None
        parent = self._adapter.find(parent_id, ItemType.FOLDER)
        if parent is None or parent.team_id != team_id:
            logger.info("Parent folder %s not found in team %s, using root", parent_id, team_id)
            return None
        return parent

    def build_breadcrumbs(self, team_id: str, folder_id: Optional[str]) -> list[Breadcrumb]:
        """
        Ancestor chain from the synthetic root to folder_id.

        Each path prefix is resolved to the folder stored at exactly that path;
        an unresolved prefix yields an entry with id None.
        """
        crumbs = [Breadcrumb(id=None, name=ROOT_BREADCRUMB_NAME, path=ROOT_PATH)]
        if not folder_id:
            return crumbs

        folder = self._adapter.find(folder_id, ItemType.FOLDER)
        if folder is None or folder.team_id != team_id:
            return crumbs

        for segment, prefix in path_prefixes(folder.folder_path):
            owner = self._adapter.find_folder_by_path(team_id, prefix)
            logger.debug("Breadcrumb %s -> %s", prefix, owner.id if owner else None)
            crumbs.append(Breadcrumb(id=owner.id if owner else None, name=segment, path=prefix))
        return crumbs

    # ----------------------------
    # Mutations
    # ----------------------------
    def move(
        self,
        item_id: str,
        item_type: ItemType,
        new_parent_id: Optional[str],
        user_id: str,
    ) -> TeamFolderItem:
        """
        Reparent an item; requires edit on the item.

        Raises:
            NotFoundError: item does not exist.
            AccessDeniedError: user_id cannot edit the item.
            ValidationError: folder would land in its own subtree, or its new
                path is already taken.
        """
        item = self._adapter.fetch(item_id, item_type)
        require_capability(item, user_id, Tier.EDIT)

        target = self.resolve_parent(item.team_id, new_parent_id)
        target_path = target.folder_path if target else ROOT_PATH

        if item.is_folder:
            validate_move_no_cycle(item, target)
            new_path = compute_path(target_path, item.name)
            validate_unique_folder_path(self._adapter, item.team_id, new_path, exclude_id=item.id)
        else:
            new_path = target_path

        old_path = item.folder_path
        updated = self._adapter.update(
            item.id,
            item_type,
            user_id,
            {"parent_id": target.id if target else None, "folder_path": new_path},
        )
        if item.is_folder and old_path != new_path:
            self.cascade_paths(updated, user_id)

        logger.info("Moved %s %s to %s", item_type.value, item.id, new_path)
        return updated

    def rename_folder(self, folder_id: str, new_name: str, user_id: str) -> TeamFolderItem:
        folder = self._adapter.fetch(folder_id, ItemType.FOLDER)
        require_capability(folder, user_id, Tier.EDIT)

        name = validate_name(new_name)
        new_path = self.build_path(folder.team_id, folder.parent_id, name)
        validate_unique_folder_path(self._adapter, folder.team_id, new_path, exclude_id=folder.id)

        updated = self._adapter.update(
            folder.id,
            ItemType.FOLDER,
            user_id,
            {"name": name, "folder_path": new_path},
        )
        if new_path != folder.folder_path:
            self.cascade_paths(updated, user_id)
        return updated

    def cascade_paths(self, folder: TeamFolderItem, user_id: str) -> int:
        """
        Recompute folderPath for everything below `folder` from its stored path.

        Rewritten descendants are stamped as modified by user_id.

        Returns the number of descendants rewritten.
        """
        count = 0
        q: deque[TeamFolderItem] = deque([folder])
        visited: set[str] = set()

        while q:
            cur = q.popleft()
            if cur.id in visited:
                continue
            visited.add(cur.id)

            for child in self._adapter.list_children(cur.team_id, cur.id):
                expected = compute_path(cur.folder_path, child.name) if child.is_folder else cur.folder_path
                if child.folder_path != expected:
                    child.folder_path = expected
                    self._adapter.touch(child, user_id)
                    count += 1
                if child.is_folder:
                    q.append(child)

        if count:
            logger.info("Updated paths of %d items under %s", count, folder.folder_path)
        return count

    # ----------------------------
    # Subtree walks
    # ----------------------------
    def collect_subtree(self, folder: TeamFolderItem) -> list[tuple[TeamFolderItem, int]]:
        """
        All descendants of `folder` with their depth below it (children = 1).

        Walks parentId links breadth-first; the folder itself is not included.
        """
        out: list[tuple[TeamFolderItem, int]] = []
        q: deque[tuple[TeamFolderItem, int]] = deque([(folder, 0)])
        visited: set[str] = {folder.id}

        while q:
            cur, depth = q.popleft()
            for child in self._adapter.list_children(cur.team_id, cur.id):
                if child.id in visited:
                    continue
                visited.add(child.id)
                out.append((child, depth + 1))
                if child.is_folder:
                    q.append((child, depth + 1))
        return out


def deletion_order(entries: list[tuple[TeamFolderItem, int]]) -> list[TeamFolderItem]:
    """
    Order items for deletion: deep -> shallow, files before folders at equal
    depth, tie-breaker discovery order.
    """
    indexed = list(enumerate(entries))
    indexed.sort(key=lambda pair: (-pair[1][1], 0 if pair[1][0].is_file else 1, pair[0]))
    return [item for _, (item, _) in indexed]
