from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import get_signing_secret
from .compare import timing_safe_equal

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "MAX_TTL_SECONDS",
    "TOKEN_HEADER",
    "SessionTokenPayload",
    "IssuedSessionToken",
    "TokenError",
    "TokenInvalidError",
    "TokenExpiredError",
    "create_session_token",
    "verify_session_token",
    "is_session_token_expired",
    "to_iso_timestamp",
]

DEFAULT_TTL_SECONDS = 60
MAX_TTL_SECONDS = 300
TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_SEPARATOR = "."


# ------------------------
# Errors
# ------------------------
class TokenError(ValueError):
    """Base class for session token errors.

    The `code` attribute gives callers a stable machine-readable reason.
    """

    code: str = "token_error"
    default_message: str = "Session token error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class TokenInvalidError(TokenError):
    """Malformed, tampered, wrong-scope or unparseable token."""

    code = "invalid_token"
    default_message = "Session token is invalid"


class TokenExpiredError(TokenError):
    """Well-formed and correctly signed, but past its lifetime."""

    code = "token_expired"
    default_message = "Session token expired"


# ------------------------
# Schema
# ------------------------
class SessionTokenPayload(BaseModel):
    """Claims carried by a session token.

    Field names are the wire names; keep their order stable, the signature
    covers the serialised JSON.
    """

    model_config = ConfigDict(strict=True, extra="allow")

    jti: Optional[str] = None  # random id, not checked on verify
    scope: str = Field(..., min_length=1)
    iat: Optional[int] = None  # issued-at, epoch seconds
    exp: int = Field(..., gt=0)  # expiry, epoch seconds (exclusive)


@dataclass(frozen=True)
class IssuedSessionToken:
    token: str
    scope: str
    expires_at: str


# ------------------------
# Internals
# ------------------------

def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


def _epoch_ms(now: datetime) -> int:
    return (now - _EPOCH) // timedelta(milliseconds=1)


def _epoch_seconds(now: datetime) -> int:
    return (now - _EPOCH) // timedelta(seconds=1)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _json_segment(data: dict) -> str:
    # Compact separators and raw UTF-8 keep tokens byte compatible with
    # tokens minted by the previous JavaScript issuer.
    as_json = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return _b64url_encode(as_json.encode("utf-8"))


def _sign(unsigned_token: str, secret: str) -> str:
    sig = hmac.new(secret.encode("utf-8"), unsigned_token.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(sig)


def to_iso_timestamp(epoch_seconds: int) -> str:
    """Render epoch seconds as an ISO-8601 UTC timestamp, e.g. 2024-01-01T00:01:30.000Z."""
    dt = datetime.fromtimestamp(epoch_seconds, UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _decode_payload(encoded_payload: str) -> SessionTokenPayload:
    try:
        data = json.loads(_b64url_decode(encoded_payload).decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        raise TokenInvalidError("Token payload could not be parsed") from e

    if not isinstance(data, dict):
        raise TokenInvalidError("Token payload missing")

    try:
        return SessionTokenPayload.model_validate(data)
    except ValidationError as e:
        raise TokenInvalidError("Token payload missing fields") from e


def _normalize_scopes(required_scope: str | Iterable[str] | None) -> tuple[str, ...] | None:
    if required_scope is None:
        return None
    if isinstance(required_scope, str):
        return (required_scope,) if required_scope else None
    return tuple(required_scope)


# ------------------------
# Public create/verify
# ------------------------

def create_session_token(
    scope: str,
    *,
    ttl_seconds: int | None = None,
    now: datetime | None = None,
    secret: str | None = None,
) -> IssuedSessionToken:
    """Mint a signed session token for `scope`.

    Requested lifetimes above MAX_TTL_SECONDS are clamped, not rejected.
    `now` and `secret` are injectable; when omitted the current time and the
    environment-resolved signing secret are used.
    """
    if not isinstance(scope, str) or not scope.strip():
        raise TokenInvalidError("Scope is required")

    if ttl_seconds is None:
        ttl_seconds = DEFAULT_TTL_SECONDS
    elif isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int):
        raise TokenInvalidError("TTL must be an integer")
    if ttl_seconds <= 0:
        raise TokenInvalidError("TTL must be greater than 0")

    bounded_ttl = min(ttl_seconds, MAX_TTL_SECONDS)
    issued_at = _epoch_seconds(_utc(now))
    exp = issued_at + bounded_ttl

    payload = {
        "jti": str(uuid4()),
        "scope": scope,
        "iat": issued_at,
        "exp": exp,
    }
    unsigned_token = f"{_json_segment(TOKEN_HEADER)}{_SEPARATOR}{_json_segment(payload)}"
    signature = _sign(unsigned_token, secret if secret is not None else get_signing_secret())
    return IssuedSessionToken(
        token=f"{unsigned_token}{_SEPARATOR}{signature}",
        scope=scope,
        expires_at=to_iso_timestamp(exp),
    )


def verify_session_token(
    token: str,
    *,
    now: datetime | None = None,
    required_scope: str | Iterable[str] | None = None,
    secret: str | None = None,
) -> SessionTokenPayload:
    """Verify a session token and return its payload.

    Check order decides which error wins: structure and signature failures
    are always TokenInvalidError, expiry is checked next, scope last.

    Raises:
        TokenInvalidError: malformed, tampered, unparseable or wrong scope.
        TokenExpiredError: valid signature but `exp` is not in the future.
    """
    if not token:
        raise TokenInvalidError("Token is required")

    segments = token.split(_SEPARATOR)
    if len(segments) != 3 or not all(segments):
        raise TokenInvalidError("Token format is invalid")

    encoded_header, encoded_payload, received_signature = segments
    unsigned_token = f"{encoded_header}{_SEPARATOR}{encoded_payload}"
    expected_signature = _sign(unsigned_token, secret if secret is not None else get_signing_secret())
    if not timing_safe_equal(received_signature, expected_signature):
        raise TokenInvalidError("Token signature mismatch")

    payload = _decode_payload(encoded_payload)

    if is_session_token_expired(payload, now):
        raise TokenExpiredError()

    scopes = _normalize_scopes(required_scope)
    if scopes is not None and payload.scope not in scopes:
        raise TokenInvalidError("Token scope is not permitted")

    return payload


def is_session_token_expired(payload: SessionTokenPayload, now: datetime | None = None) -> bool:
    """True once `now` has reached `exp`; the expiry instant itself is expired."""
    return payload.exp * 1000 <= _epoch_ms(_utc(now))
