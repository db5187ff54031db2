"""Read-only view of a team document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class TeamMember:
    user_id: str
    role: str = "member"


@dataclass(slots=True)
class Team:
    id: str
    name: str = ""
    members: dict[str, TeamMember] = field(default_factory=dict)
    allow_file_sharing: bool = True

    @classmethod
    def from_document(cls, team_id: str, data: dict[str, Any]) -> Team:
        """
        Build from a `teams` document.

        `members` is a map of user id -> {"role": ...}; a member entry without a
        role counts as "member".
        """
        raw_members = data.get("members") or {}
        members: dict[str, TeamMember] = {}
        if isinstance(raw_members, dict):
            for user_id, entry in raw_members.items():
                role = entry.get("role") if isinstance(entry, dict) else None
                members[user_id] = TeamMember(user_id=user_id, role=role or "member")

        settings = data.get("settings") or {}
        allow = settings.get("allowFileSharing", True) if isinstance(settings, dict) else True

        return cls(
            id=team_id,
            name=str(data.get("name") or ""),
            members=members,
            allow_file_sharing=bool(allow),
        )

    def is_member(self, user_id: str) -> bool:
        return user_id in self.members

    def role_of(self, user_id: str) -> Optional[str]:
        member = self.members.get(user_id)
        return member.role if member else None
