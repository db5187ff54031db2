"""Public permission exports for teamstore."""

from __future__ import annotations

from .model import (
    ROLE_TIERS,
    TeamLookup,
    derive_permissions,
    derive_team_permissions,
    effective_permissions,
    ensure_has_admin,
    has_capability,
    require_capability,
    set_user_tier,
    tier_for_role,
)

__all__ = [
    "ROLE_TIERS",
    "TeamLookup",
    "effective_permissions",
    "has_capability",
    "require_capability",
    "tier_for_role",
    "set_user_tier",
    "derive_permissions",
    "derive_team_permissions",
    "ensure_has_admin",
]
