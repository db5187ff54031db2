"""Credential loading and Google client construction for teamstore."""

from __future__ import annotations

import os
from typing import Optional, Sequence

from teamstore.errors import AuthError, ValidationError

from .auth_info import AuthInfo

DRIVE_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive.file",)
DATASTORE_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/datastore",)


class CredentialsProvider:
    """Load Google credentials and build the Drive service and Firestore client."""

    def __init__(self, auth_info: AuthInfo) -> None:
        self._auth_info = auth_info

    def get_credentials(self, scopes: Sequence[str]):
        """
        Return credentials for the given scopes.

        Returns:
            google.auth.credentials.Credentials

        Raises:
            AuthError: on load/refresh/flow failures.
            ValidationError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise ValidationError("scopes must be a non-empty sequence of strings")

        if self._auth_info.kind == "service_account":
            return self._service_account_credentials(scopes)
        return self._oauth_credentials(scopes)

    def build_drive_service(self, scopes: Sequence[str] = DRIVE_SCOPES):
        """Build a Drive v3 service resource."""
        from googleapiclient.discovery import build

        creds = self.get_credentials(scopes)
        try:
            return build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc

    def build_firestore_client(
        self,
        project: Optional[str],
        *,
        database: str = "(default)",
    ):
        """Build a google.cloud.firestore.Client."""
        from google.cloud import firestore

        creds = self.get_credentials(DATASTORE_SCOPES)
        try:
            return firestore.Client(project=project, credentials=creds, database=database)
        except Exception as exc:
            raise AuthError(
                "Failed to build Firestore client",
                details={"project": project, "database": database},
                cause=exc,
            ) from exc

    # ----------------------------
    # Internals
    # ----------------------------
    def _service_account_credentials(self, scopes: Sequence[str]):
        from google.oauth2 import service_account

        path = self._auth_info.credentials_file
        try:
            return service_account.Credentials.from_service_account_file(
                path,
                scopes=list(scopes),
            )
        except Exception as exc:
            raise AuthError(
                "Failed to load service account credentials",
                details={"credentials_file": path},
                cause=exc,
            ) from exc

    def _oauth_credentials(self, scopes: Sequence[str]):
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow

        token_file = self._auth_info.token_file or ""
        creds = None

        if token_file and os.path.exists(token_file):
            try:
                creds = Credentials.from_authorized_user_file(token_file, scopes=list(scopes))
            except Exception as exc:
                raise AuthError(
                    "Failed to load token_file",
                    details={"token_file": token_file},
                    cause=exc,
                ) from exc

            if not creds.valid and creds.refresh_token:
                try:
                    creds.refresh(Request())
                    self._save_token(creds)
                except Exception as exc:
                    raise AuthError(
                        "Failed to refresh OAuth credentials",
                        details={"token_file": token_file},
                        cause=exc,
                    ) from exc

            if creds.valid:
                return creds

        client_secrets = self._auth_info.credentials_file
        try:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes=list(scopes))
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise AuthError(
                "OAuth authorization flow failed",
                details={"credentials_file": client_secrets, "token_file": token_file},
                cause=exc,
            ) from exc
        self._save_token(creds)
        return creds

    def _save_token(self, creds) -> None:
        token_file = self._auth_info.token_file
        if not token_file:
            return
        token_dir = os.path.dirname(token_file)
        if token_dir:
            os.makedirs(token_dir, exist_ok=True)

        try:
            with open(token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise AuthError(
                "Failed to save OAuth token file",
                details={"token_file": token_file},
                cause=exc,
            ) from exc
