from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SessionToken:
    """A session token as returned by the gate during the smoke run."""

    token: str = field(repr=False)
    scope: str
    expires_at: str


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class MintError(SmokeError):
    """Raised when minting a token with Basic credentials fails."""


class RenewError(SmokeError):
    """Raised when re-validating a token with Bearer auth fails."""


class RejectionError(SmokeError):
    """Raised when an unauthenticated request is not rejected as expected."""
