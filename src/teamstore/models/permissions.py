"""Permission tiers attached to every file and folder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Tier(str, Enum):
    """Capability tiers, lowest first."""

    VIEW = "view"
    EDIT = "edit"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER: tuple[Tier, ...] = (Tier.VIEW, Tier.EDIT, Tier.ADMIN)


@dataclass(slots=True)
class Permissions:
    """
    Three user-id sets (kept as ordered lists for stable storage).

    Sets written by this library satisfy admin ⊆ edit ⊆ view. Documents written
    by older clients may hold a user in a single tier only; reads accept both.
    """

    view: list[str] = field(default_factory=list)
    edit: list[str] = field(default_factory=list)
    admin: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Permissions:
        data = data or {}
        return cls(
            view=_id_list(data.get("view")),
            edit=_id_list(data.get("edit")),
            admin=_id_list(data.get("admin")),
        )

    @classmethod
    def creator_only(cls, creator_id: str) -> Permissions:
        return cls(view=[creator_id], edit=[creator_id], admin=[creator_id])

    def to_dict(self) -> dict[str, list[str]]:
        return {"view": list(self.view), "edit": list(self.edit), "admin": list(self.admin)}

    def clone(self) -> Permissions:
        return Permissions(view=list(self.view), edit=list(self.edit), admin=list(self.admin))

    def members(self, tier: Tier) -> list[str]:
        return getattr(self, tier.value)

    def highest_tier(self, user_id: str) -> Optional[Tier]:
        """Highest tier listing user_id, or None."""
        for tier in reversed(_TIER_ORDER):
            if user_id in self.members(tier):
                return tier
        return None

    def all_users(self) -> set[str]:
        return set(self.view) | set(self.edit) | set(self.admin)


@dataclass(slots=True, frozen=True)
class EffectivePermissions:
    """What one user may do with one item."""

    can_view: bool
    can_edit: bool
    can_manage: bool
    is_owner: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "canView": self.can_view,
            "canEdit": self.can_edit,
            "canManage": self.can_manage,
            "isOwner": self.is_owner,
        }


def _id_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    out: list[str] = []
    for v in value:
        if isinstance(v, str) and v and v not in out:
            out.append(v)
    return out
