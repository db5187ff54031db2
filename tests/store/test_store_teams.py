import unittest

from teamstore.errors import AccessDeniedError, NotFoundError
from teamstore.store import TEAMS_COLLECTION, InMemoryBackend, TeamDirectory


class TestTeamDirectory(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = InMemoryBackend()
        self.backend.set(
            TEAMS_COLLECTION,
            "t1",
            {"name": "Core", "members": {"alice": {"role": "owner"}}},
        )
        self.backend.set(
            TEAMS_COLLECTION,
            "t2",
            {"members": {"alice": {}}, "settings": {"allowFileSharing": False}},
        )
        self.teams = TeamDirectory(self.backend)

    def test_get_team(self) -> None:
        self.assertEqual(self.teams.get_team("t1").name, "Core")

    def test_missing_team(self) -> None:
        with self.assertRaises(NotFoundError):
            self.teams.get_team("nope")
        with self.assertRaises(NotFoundError):
            self.teams.get_team("")

    def test_require_member(self) -> None:
        self.assertEqual(self.teams.require_member("t1", "alice").id, "t1")
        with self.assertRaises(AccessDeniedError) as ctx:
            self.teams.require_member("t1", "bob")
        self.assertEqual(str(ctx.exception), "Access denied: Not a team member")

    def test_sharing_disabled(self) -> None:
        self.teams.require_sharing_allowed("t1", "alice")
        with self.assertRaises(AccessDeniedError) as ctx:
            self.teams.require_sharing_allowed("t2", "alice")
        self.assertEqual(str(ctx.exception), "File sharing is disabled for this team")
