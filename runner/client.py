from __future__ import annotations

import asyncio
import base64
import time

import httpx

from realtime_session.logging_conf import get_logger
from runner.types import MintError, RejectionError, RenewError, SessionToken, SmokeError

logger = get_logger("runner.client")

SESSION_PATH = "/api/session"


def basic_auth_header(username: str, password: str) -> str:
    """Build an `Authorization: Basic` header value."""
    raw = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def _session_token(data: dict) -> SessionToken:
    return SessionToken(token=data["token"], scope=data["scope"], expires_at=data["expiresAt"])


async def wait_for_health(client: httpx.AsyncClient, timeout_s: float = 20.0) -> None:
    """Ping /health until it returns ok or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        try:
            r = await client.get("/health")
            if r.status_code == 200 and r.json().get("ok") is True:
                logger.info("health.ok", extra={"event": "health_ok"})
                return
        except httpx.HTTPError:
            pass
        await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def mint_token(
    client: httpx.AsyncClient,
    *,
    username: str,
    password: str,
    scope: str | None = None,
    ttl_seconds: int | None = None,
) -> SessionToken:
    """Mint a session token with Basic credentials."""
    body: dict = {}
    if scope is not None:
        body["scope"] = scope
    if ttl_seconds is not None:
        body["ttlSeconds"] = ttl_seconds

    r = await client.post(
        SESSION_PATH,
        headers={"Authorization": basic_auth_header(username, password)},
        json=body or None,
    )
    if r.status_code != 200:
        raise MintError(f"mint failed with {r.status_code}: {r.text}")
    minted = _session_token(r.json())
    logger.info(
        "token.minted",
        extra={"event": "token_minted", "scope": minted.scope, "expires_at": minted.expires_at},
    )
    return minted


async def renew_token(client: httpx.AsyncClient, token: str) -> SessionToken:
    """Re-validate a session token with Bearer auth."""
    r = await client.post(SESSION_PATH, headers={"Authorization": f"Bearer {token}"})
    if r.status_code != 200:
        raise RenewError(f"renew failed with {r.status_code}: {r.text}")
    renewed = _session_token(r.json())
    logger.info(
        "token.renewed",
        extra={"event": "token_renewed", "scope": renewed.scope, "expires_at": renewed.expires_at},
    )
    return renewed


async def expect_unauthorized(client: httpx.AsyncClient) -> None:
    """Check that a request without credentials is rejected with 401."""
    r = await client.post(SESSION_PATH)
    if r.status_code != 401 or r.json() != {"error": "Unauthorized"}:
        raise RejectionError(f"expected 401 Unauthorized, got {r.status_code}: {r.text}")
