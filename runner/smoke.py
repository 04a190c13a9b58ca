#!/usr/bin/env python3
"""High-level smoke runner orchestrating the end-to-end session flow.

Steps:
- wait for server health
- mint a token with Basic credentials
- renew it with Bearer auth and check scope/expiry agree
- confirm an unauthenticated request gets 401
- emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from realtime_session.config import Settings
from realtime_session.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import expect_unauthorized, mint_token, renew_token, wait_for_health
from runner.types import RenewError, SmokeError

logger = get_logger("runner")


async def run_smoke(
    *,
    base_url: str,
    password: str,
    username: str = "smoke",
    scope: str | None = None,
    ttl_seconds: int | None = None,
    timeout_s: float = 20.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    summary: dict = {"component": "runner", "event": "summary", "steps": {}}
    steps = summary["steps"]
    exit_code = 0

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0, transport=transport) as client:
        try:
            await wait_for_health(client, timeout_s)
            steps["health"] = "ok"

            minted = await mint_token(
                client, username=username, password=password, scope=scope, ttl_seconds=ttl_seconds
            )
            steps["mint"] = "ok"
            summary["scope"] = minted.scope
            summary["expires_at"] = minted.expires_at

            renewed = await renew_token(client, minted.token)
            if (renewed.scope, renewed.expires_at) != (minted.scope, minted.expires_at):
                raise RenewError("renewed token does not match minted token")
            steps["renew"] = "ok"

            await expect_unauthorized(client)
            steps["reject"] = "ok"
        except SmokeError as e:
            summary["error"] = str(e)
            exit_code = 1

    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    setup_logging(Settings.from_env().log_level)
    args = parse_args(argv or sys.argv[1:])
    code = asyncio.run(
        run_smoke(
            base_url=args.base_url,
            password=args.password,
            username=args.username,
            scope=args.scope,
            ttl_seconds=args.ttl_seconds,
            timeout_s=args.timeout,
        )
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
