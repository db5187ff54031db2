"""Public auth exports for teamstore."""

from __future__ import annotations

from .auth_info import AuthInfo
from .credentials import DATASTORE_SCOPES, DRIVE_SCOPES, CredentialsProvider

__all__ = ["AuthInfo", "CredentialsProvider", "DRIVE_SCOPES", "DATASTORE_SCOPES"]
