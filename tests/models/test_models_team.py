import unittest

from teamstore.models import Team


class TestTeam(unittest.TestCase):
    def test_from_document(self) -> None:
        team = Team.from_document(
            "t1",
            {
                "name": "Core",
                "members": {"alice": {"role": "owner"}, "bob": {}},
                "settings": {"allowFileSharing": False},
            },
        )
        self.assertEqual(team.name, "Core")
        self.assertEqual(team.role_of("alice"), "owner")
        self.assertEqual(team.role_of("bob"), "member")
        self.assertFalse(team.allow_file_sharing)
        self.assertTrue(team.is_member("bob"))
        self.assertFalse(team.is_member("carol"))
        self.assertIsNone(team.role_of("carol"))

    def test_sharing_defaults_to_allowed(self) -> None:
        team = Team.from_document("t1", {"members": {}})
        self.assertTrue(team.allow_file_sharing)
