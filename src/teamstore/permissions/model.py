"""Permission model: effective capabilities, team-derived defaults, tier rewrites."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from teamstore.errors import AccessDeniedError, TeamStoreError, ValidationError
from teamstore.models import EffectivePermissions, Permissions, Team, TeamFolderItem, Tier

logger = logging.getLogger(__name__)

ROLE_TIERS: dict[str, Tier] = {
    "owner": Tier.ADMIN,
    "admin": Tier.ADMIN,
    "member": Tier.EDIT,
    "viewer": Tier.VIEW,
}

_DENIED_MESSAGES: dict[Tier, str] = {
    Tier.VIEW: "Access denied: No view permission",
    Tier.EDIT: "Access denied: No edit permission",
    Tier.ADMIN: "Access denied: No admin permission",
}


class TeamLookup(Protocol):
    def get_team(self, team_id: str) -> Team: ...


def effective_permissions(item: TeamFolderItem, user_id: str) -> EffectivePermissions:
    """
    Compute what user_id may do with item.

    Tiers are read as a union so documents holding a user in a single tier
    (older writers) still grant everything below that tier.
    """
    perms = item.permissions
    in_admin = user_id in perms.admin
    in_edit = in_admin or user_id in perms.edit
    in_view = in_edit or user_id in perms.view
    return EffectivePermissions(
        can_view=in_view,
        can_edit=in_edit,
        can_manage=in_admin,
        is_owner=item.created_by == user_id,
    )


def has_capability(item: TeamFolderItem, user_id: str, tier: Tier) -> bool:
    eff = effective_permissions(item, user_id)
    if tier is Tier.ADMIN:
        return eff.can_manage
    if tier is Tier.EDIT:
        return eff.can_edit
    return eff.can_view


def require_capability(item: TeamFolderItem, user_id: str, tier: Tier) -> None:
    """Raise AccessDeniedError unless user_id holds `tier` on item."""
    if not has_capability(item, user_id, tier):
        raise AccessDeniedError(
            _DENIED_MESSAGES[tier],
            details={"item_id": item.id, "user_id": user_id, "required": tier.value},
        )


def tier_for_role(role: Optional[str]) -> Tier:
    """Map a team role onto a tier; unknown roles get view only."""
    if not role:
        return Tier.EDIT
    return ROLE_TIERS.get(role, Tier.VIEW)


def set_user_tier(
    permissions: Permissions,
    user_id: str,
    tier: Optional[Tier],
) -> Permissions:
    """
    Return a copy of permissions where user_id holds exactly `tier`.

    The user is placed in `tier` and every tier below it, and removed from every
    tier above it. tier=None removes the user from all three sets.
    """
    if not user_id:
        raise ValidationError("user_id must be a non-empty string")

    out = permissions.clone()
    for t in Tier:
        ids = out.members(t)
        should_hold = tier is not None and t.rank <= tier.rank
        if should_hold and user_id not in ids:
            ids.append(user_id)
        elif not should_hold and user_id in ids:
            ids.remove(user_id)
    return out


def derive_permissions(team: Team, creator_id: str) -> Permissions:
    """
    Build default permissions for a new item from team membership roles.

    The creator always ends up with admin, whatever their role.
    """
    perms = Permissions()
    for member in team.members.values():
        perms = set_user_tier(perms, member.user_id, tier_for_role(member.role))
    return set_user_tier(perms, creator_id, Tier.ADMIN)


def derive_team_permissions(
    teams: TeamLookup,
    team_id: str,
    creator_id: str,
) -> Permissions:
    """
    Team-derived permissions with a creator-only fallback.

    A missing team or a creator outside the team degrades to creator-only access
    instead of failing the surrounding create/share operation.
    """
    try:
        team = teams.get_team(team_id)
    except TeamStoreError as exc:
        logger.warning("Team lookup failed for %s, using creator-only permissions: %s",
                       team_id, exc)
        return Permissions.creator_only(creator_id)

    if not team.is_member(creator_id):
        logger.warning("Creator %s is not a member of team %s, using creator-only permissions",
                       creator_id, team_id)
        return Permissions.creator_only(creator_id)

    return derive_permissions(team, creator_id)


def ensure_has_admin(permissions: Permissions, item_id: str) -> None:
    if not permissions.admin:
        raise ValidationError(
            "At least one user must keep admin permission",
            details={"item_id": item_id},
        )
