"""Authentication information for teamstore's Google backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

_REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "service_account": ("credentials_file",),
    "oauth": ("credentials_file", "token_file"),
}


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    kind = "service_account":
        data["credentials_file"]: service account key JSON (server deployments)
    kind = "oauth":
        data["credentials_file"]: OAuth client secrets JSON
        data["token_file"]: authorized-user token JSON (created on first run)
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind not in _REQUIRED_KEYS:
            raise ValueError("AuthInfo.kind must be 'service_account' or 'oauth'")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in _REQUIRED_KEYS[self.kind]:
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

    @property
    def credentials_file(self) -> str:
        return str(self.data["credentials_file"])

    @property
    def token_file(self) -> Optional[str]:
        value = self.data.get("token_file")
        return str(value) if value else None
