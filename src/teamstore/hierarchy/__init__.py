"""Public hierarchy exports for teamstore."""

from __future__ import annotations

from .manager import ROOT_BREADCRUMB_NAME, HierarchyManager, deletion_order
from .paths import (
    ROOT_PATH,
    compute_path,
    is_same_or_descendant,
    path_prefixes,
    path_segments,
    validate_name,
)
from .validators import (
    validate_move_no_cycle,
    validate_same_team,
    validate_subtree_capability,
    validate_unique_folder_path,
)

__all__ = [
    "HierarchyManager",
    "ROOT_BREADCRUMB_NAME",
    "deletion_order",
    "ROOT_PATH",
    "compute_path",
    "is_same_or_descendant",
    "path_prefixes",
    "path_segments",
    "validate_name",
    "validate_move_no_cycle",
    "validate_same_team",
    "validate_subtree_capability",
    "validate_unique_folder_path",
]
