import unittest
from unittest.mock import Mock, patch

from teamstore.auth import DRIVE_SCOPES, AuthInfo, CredentialsProvider
from teamstore.errors import AuthError, ValidationError


def _sa_info() -> AuthInfo:
    return AuthInfo(kind="service_account", data={"credentials_file": "/tmp/sa.json"})


class TestCredentialsProvider(unittest.TestCase):
    def test_rejects_empty_scopes(self) -> None:
        provider = CredentialsProvider(_sa_info())
        with self.assertRaises(ValidationError):
            provider.get_credentials([])
        with self.assertRaises(ValidationError):
            provider.get_credentials([" "])

    def test_service_account_credentials(self) -> None:
        creds = Mock()
        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_file",
            return_value=creds,
        ) as loader:
            result = CredentialsProvider(_sa_info()).get_credentials(DRIVE_SCOPES)

        self.assertIs(result, creds)
        loader.assert_called_once_with("/tmp/sa.json", scopes=list(DRIVE_SCOPES))

    def test_service_account_failure_is_auth_error(self) -> None:
        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_file",
            side_effect=FileNotFoundError("missing"),
        ):
            with self.assertRaises(AuthError) as ctx:
                CredentialsProvider(_sa_info()).get_credentials(DRIVE_SCOPES)

        self.assertEqual(ctx.exception.details["credentials_file"], "/tmp/sa.json")
        self.assertIsInstance(ctx.exception.cause, FileNotFoundError)

    def test_build_drive_service(self) -> None:
        service = Mock()
        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_file",
            return_value=Mock(),
        ), patch("googleapiclient.discovery.build", return_value=service) as build:
            result = CredentialsProvider(_sa_info()).build_drive_service()

        self.assertIs(result, service)
        self.assertEqual(build.call_args.args, ("drive", "v3"))
        self.assertFalse(build.call_args.kwargs["cache_discovery"])

    def test_build_drive_service_failure_is_auth_error(self) -> None:
        with patch(
            "google.oauth2.service_account.Credentials.from_service_account_file",
            return_value=Mock(),
        ), patch("googleapiclient.discovery.build", side_effect=RuntimeError("boom")):
            with self.assertRaises(AuthError):
                CredentialsProvider(_sa_info()).build_drive_service()


if __name__ == "__main__":
    unittest.main()
