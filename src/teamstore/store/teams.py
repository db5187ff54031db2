"""Read-only access to the `teams` collection."""

from __future__ import annotations

from teamstore.errors import AccessDeniedError, NotFoundError
from teamstore.models import Team

from .backend import TEAMS_COLLECTION, DocumentBackend


class TeamDirectory:
    def __init__(self, backend: DocumentBackend) -> None:
        self._backend = backend

    def get_team(self, team_id: str) -> Team:
        data = self._backend.get(TEAMS_COLLECTION, team_id) if team_id else None
        if data is None:
            raise NotFoundError("Team not found", details={"team_id": team_id})
        return Team.from_document(team_id, data)

    def require_member(self, team_id: str, user_id: str) -> Team:
        """Return the team, or raise AccessDeniedError if user_id is not a member."""
        team = self.get_team(team_id)
        if not team.is_member(user_id):
            raise AccessDeniedError(
                "Access denied: Not a team member",
                details={"team_id": team_id, "user_id": user_id},
            )
        return team

    def require_sharing_allowed(self, team_id: str, user_id: str) -> Team:
        team = self.require_member(team_id, user_id)
        if not team.allow_file_sharing:
            raise AccessDeniedError(
                "File sharing is disabled for this team",
                details={"team_id": team_id},
            )
        return team
