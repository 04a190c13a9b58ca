"""Process configuration, read once from the environment at startup.

The resulting `Settings` value is passed explicitly to the credential gate and
the token engine; nothing below reads the environment mid-request.

Signing secret resolution order:
REALTIME_SESSION_SECRET, then APP_PASSWORD, then a fixed development value.
The development value is public and must never be relied on outside local dev.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field

__all__ = [
    "DEVELOPMENT_SIGNING_SECRET",
    "Settings",
    "get_signing_secret",
]

DEVELOPMENT_SIGNING_SECRET = "development-session-secret"


def _env(name: str) -> str | None:
    # Empty strings count as unset so a blank variable never becomes a secret.
    val = os.getenv(name)
    return val if val else None


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration."""

    app_password: str | None = field(default=None, repr=False)
    session_secret: str | None = field(default=None, repr=False)
    log_level: str = "INFO"
    app_version: str = "0.1.0"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            app_password=_env("APP_PASSWORD"),
            session_secret=_env("REALTIME_SESSION_SECRET"),
            log_level=(_env("LOG_LEVEL") or "INFO").upper(),
            app_version=_env("APP_VERSION") or "0.1.0",
        )

    @property
    def signing_secret(self) -> str:
        return self.session_secret or self.app_password or DEVELOPMENT_SIGNING_SECRET

    @property
    def uses_development_secret(self) -> bool:
        return not (self.session_secret or self.app_password)


def get_signing_secret() -> str:
    """Resolve the signing secret from the current environment."""
    return Settings.from_env().signing_secret
