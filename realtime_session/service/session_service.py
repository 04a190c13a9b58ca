from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from ..api.models import SessionRequest, SessionResponse
from ..config import Settings
from ..domain.basic_auth import parse_basic_auth_header, verify_app_password
from ..domain.tokens import (
    TokenExpiredError,
    TokenInvalidError,
    create_session_token,
    to_iso_timestamp,
    verify_session_token,
)
from ..logging_conf import get_logger

logger = get_logger("service.session")

_BEARER_PREFIX = "bearer "
_JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class SessionOutcome:
    """HTTP-agnostic result of handling one session request."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


# ------------------------
# Helpers
# ------------------------

def _error(status_code: int, message: str, **extra: Any) -> SessionOutcome:
    return SessionOutcome(status_code=status_code, body={"error": message, **extra})


def _unauthorized() -> SessionOutcome:
    return _error(401, "Unauthorized")


def _reject(reason: str, outcome: SessionOutcome) -> SessionOutcome:
    logger.info(
        "session.reject",
        extra={"event": "session_reject", "reason": reason, "status_code": outcome.status_code},
    )
    return outcome


def _load_body(content_type: str | None, body: bytes | None) -> Any:
    """Decode a JSON body, or return {} when it is absent or unreadable.

    Credential-only requests must still mint with defaults, so decode
    failures fall back silently instead of producing a 400.
    """
    if not content_type or _JSON_CONTENT_TYPE not in content_type.lower():
        return {}
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return {}
    return {} if data is None else data


def _issues(exc: ValidationError) -> list[dict[str, Any]]:
    return [{"path": list(err["loc"]), "message": err["msg"]} for err in exc.errors()]


# ------------------------
# Branches
# ------------------------

def _handle_bearer(token: str, *, settings: Settings, now: datetime | None) -> SessionOutcome:
    if not token:
        return _reject("empty_bearer", _error(401, "Session token is required"))

    try:
        payload = verify_session_token(token, now=now, secret=settings.signing_secret)
        response = SessionResponse(
            token=token,
            scope=payload.scope,
            expiresAt=to_iso_timestamp(payload.exp),
        )
    except TokenExpiredError as e:
        return _reject(e.code, _error(401, e.message))
    except TokenInvalidError as e:
        return _reject(e.code, _error(403, e.message))
    except Exception:
        logger.exception("session.verify_error", extra={"event": "session_verify_error"})
        return _error(500, "Failed to validate session token")

    logger.info(
        "session.renew",
        extra={"event": "session_renew", "scope": payload.scope, "status_code": 200},
    )
    return SessionOutcome(status_code=200, body=response.model_dump())


def _handle_basic(
    authorization: str,
    *,
    content_type: str | None,
    body: bytes | None,
    settings: Settings,
    now: datetime | None,
) -> SessionOutcome:
    credentials = parse_basic_auth_header(authorization)
    if credentials is None or not verify_app_password(credentials.password, settings.app_password):
        return _reject("bad_credentials", _unauthorized())

    try:
        req = SessionRequest.model_validate(_load_body(content_type, body))
    except ValidationError as e:
        return _reject("invalid_body", _error(400, "Invalid request body", issues=_issues(e)))

    issued = create_session_token(
        req.scope,
        ttl_seconds=req.ttlSeconds,
        now=now,
        secret=settings.signing_secret,
    )
    response = SessionResponse(token=issued.token, expiresAt=issued.expires_at, scope=issued.scope)
    logger.info(
        "session.mint",
        extra={
            "event": "session_mint",
            "scope": issued.scope,
            "expires_at": issued.expires_at,
            "status_code": 200,
        },
    )
    return SessionOutcome(status_code=200, body=response.model_dump())


# ------------------------
# Use-case
# ------------------------

def handle_session_request(
    *,
    authorization: str | None,
    content_type: str | None,
    body: bytes | None,
    settings: Settings,
    now: datetime | None = None,
) -> SessionOutcome:
    """Mint a token for Basic credentials or re-validate a Bearer token.

    The first matching branch is terminal:
      no header          -> 401 Unauthorized
      Bearer <token>     -> verify; 200 / 401 expired / 403 invalid / 500
      anything else      -> Basic credentials; 401 / 400 bad body / 200 minted
    """
    if not authorization:
        return _reject("missing_authorization", _unauthorized())

    if authorization.lower().startswith(_BEARER_PREFIX):
        token = authorization[len(_BEARER_PREFIX):].strip()
        return _handle_bearer(token, settings=settings, now=now)

    return _handle_basic(
        authorization,
        content_type=content_type,
        body=body,
        settings=settings,
        now=now,
    )
