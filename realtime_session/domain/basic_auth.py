from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field

from .compare import timing_safe_equal

__all__ = [
    "BasicAuthCredentials",
    "parse_basic_auth_header",
    "verify_app_password",
]


@dataclass(frozen=True)
class BasicAuthCredentials:
    """Credentials decoded from an `Authorization: Basic ...` header.

    The username is carried for completeness but never used for authorization.
    """

    username: str
    password: str = field(repr=False)


def _b64decode(value: str) -> bytes | None:
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return None


def parse_basic_auth_header(header: str | None) -> BasicAuthCredentials | None:
    """Parse a Basic authorization header and return the credentials.

    Returns None when the header is missing, uses another scheme, is not valid
    base64, or has no `:` separator. Callers must treat None exactly like a
    wrong password.
    """
    if not header:
        return None

    parts = header.split(" ")
    scheme = parts[0]
    value = parts[1] if len(parts) > 1 else ""
    if not scheme or not value or scheme.lower() != "basic":
        return None

    raw = _b64decode(value)
    if raw is None:
        return None

    decoded = raw.decode("utf-8", errors="replace")
    # Passwords may contain colons; only the first one separates.
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return BasicAuthCredentials(username=username, password=password)


def verify_app_password(candidate: str | None, expected: str | None) -> bool:
    """Check a candidate password against the configured app password.

    Fails closed when no app password is configured.
    """
    if not expected:
        return False
    return timing_safe_equal(candidate or "", expected)
