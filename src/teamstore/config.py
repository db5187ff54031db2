"""
Settings for teamstore, read from TEAMSTORE_* environment variables.

Usage:
    from teamstore.config import load_settings
    settings = load_settings()
"""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

import pydantic
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator, model_validator

from teamstore.auth import AuthInfo
from teamstore.errors import ValidationError
from teamstore.storage.tiers import DOCUMENT_LIMIT, INLINE_LIMIT, TierLimits

ENV_PREFIX: str = "TEAMSTORE_"

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StoreSettings(BaseModel):
    firestore_project: Optional[str] = None
    firestore_database: str = "(default)"
    drive_folder_id: Optional[str] = None

    auth_kind: Literal["service_account", "oauth"] = "service_account"
    credentials_file: Optional[str] = None
    token_file: Optional[str] = None

    inline_limit_bytes: int = INLINE_LIMIT
    document_limit_bytes: int = DOCUMENT_LIMIT

    sync_interval_seconds: float = 300.0
    sync_stale_after_seconds: float = 3600.0
    local_cache_path: str = ".teamstore/cache.json"

    log_level: str = "INFO"

    @field_validator(
        "inline_limit_bytes",
        "document_limit_bytes",
        "sync_interval_seconds",
        "sync_stale_after_seconds",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got '{v}'")
        return v

    @model_validator(mode="after")
    def validate_limits(self) -> StoreSettings:
        if self.inline_limit_bytes >= self.document_limit_bytes:
            raise ValueError("inline_limit_bytes must be below document_limit_bytes")
        return self

    def tier_limits(self) -> TierLimits:
        return TierLimits(
            inline_limit=self.inline_limit_bytes,
            document_limit=self.document_limit_bytes,
        )

    def auth_info(self) -> Optional[AuthInfo]:
        """AuthInfo for the Google clients, or None when no credentials are configured."""
        if not self.credentials_file:
            return None
        data = {"credentials_file": self.credentials_file}
        if self.token_file:
            data["token_file"] = self.token_file
        return AuthInfo(kind=self.auth_kind, data=data)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[str] = None,
) -> StoreSettings:
    """
    Build settings from `env` (default: os.environ after loading .env).

    Raises:
        ValidationError: if a value is missing its expected type or breaks a limit.
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    values: dict[str, str] = {}
    for name in StoreSettings.model_fields:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()

    try:
        return StoreSettings(**values)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            "Invalid teamstore settings",
            details={"errors": [e["msg"] for e in exc.errors()]},
            cause=exc,
        ) from exc
