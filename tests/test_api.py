from __future__ import annotations

import logging
import time
from datetime import UTC, datetime

from fastapi.testclient import TestClient

from conftest import APP_PASSWORD, basic
from realtime_session.config import Settings
from realtime_session.main import create_app


def _expires_in(response_json) -> float:
    expires = datetime.fromisoformat(response_json["expiresAt"])
    return expires.timestamp() - time.time()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_scenario_a_mint_with_basic_credentials(client):
    r = client.post("/api/session", headers={"Authorization": basic("x", APP_PASSWORD)})
    assert r.status_code == 200
    data = r.json()
    assert data["scope"] == "practice"
    assert data["token"].count(".") == 2
    assert 58 <= _expires_in(data) <= 61


def test_scenario_b_renew_with_bearer(client):
    minted = client.post("/api/session", headers={"Authorization": basic("x", APP_PASSWORD)}).json()

    r = client.post("/api/session", headers={"Authorization": f"Bearer {minted['token']}"})
    assert r.status_code == 200
    assert r.json() == minted


def test_scenario_c_no_credentials(client):
    r = client.post("/api/session")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_scenario_d_wrong_password_matches_no_credentials(client):
    wrong = client.post("/api/session", headers={"Authorization": basic("x", "wrong")})
    missing = client.post("/api/session")
    assert wrong.status_code == missing.status_code == 401
    assert wrong.json() == missing.json() == {"error": "Unauthorized"}


def test_json_body_is_honoured(client):
    r = client.post(
        "/api/session",
        headers={"Authorization": basic("x", APP_PASSWORD)},
        json={"scope": "lecture", "ttlSeconds": 30},
    )
    assert r.status_code == 200
    assert r.json()["scope"] == "lecture"
    assert 28 <= _expires_in(r.json()) <= 31


def test_invalid_body_lists_issues(client):
    r = client.post(
        "/api/session",
        headers={"Authorization": basic("x", APP_PASSWORD)},
        json={"ttlSeconds": 601},
    )
    assert r.status_code == 400
    data = r.json()
    assert data["error"] == "Invalid request body"
    assert data["issues"][0]["path"] == ["ttlSeconds"]


def test_form_body_is_ignored(client):
    r = client.post(
        "/api/session",
        headers={"Authorization": basic("x", APP_PASSWORD)},
        data={"ttlSeconds": "0"},
    )
    assert r.status_code == 200
    assert r.json()["scope"] == "practice"


def test_tampered_bearer_is_forbidden(client):
    minted = client.post("/api/session", headers={"Authorization": basic("x", APP_PASSWORD)}).json()
    tampered = minted["token"][:-1] + ("A" if minted["token"][-1] != "A" else "B")

    r = client.post("/api/session", headers={"Authorization": f"Bearer {tampered}"})
    assert r.status_code == 403
    assert r.json() == {"error": "Token signature mismatch"}


def test_get_not_allowed(client):
    assert client.get("/api/session").status_code == 405


def test_request_id_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_expires_at_is_utc_iso(client):
    r = client.post("/api/session", headers={"Authorization": basic("x", APP_PASSWORD)})
    expires = datetime.fromisoformat(r.json()["expiresAt"])
    assert expires.tzinfo is not None
    assert expires.utcoffset() == UTC.utcoffset(None)


class TestStartupWarnings:
    def _startup_messages(self, caplog, settings) -> list[str]:
        with caplog.at_level(logging.INFO, logger="realtime_session"):
            with TestClient(create_app(settings)):
                pass
        return [r.getMessage() for r in caplog.records if r.name == "realtime_session"]

    def test_development_secret_is_flagged(self, caplog):
        messages = self._startup_messages(caplog, Settings())
        assert "config.development_signing_secret" in messages
        assert "config.no_app_password" in messages
        assert messages[0] == "startup"
        assert messages[-1] == "shutdown"

    def test_configured_secrets_start_quietly(self, caplog, settings):
        messages = self._startup_messages(caplog, settings)
        assert "config.development_signing_secret" not in messages
        assert "config.no_app_password" not in messages

    def test_app_password_alone_still_signs_with_a_real_secret(self, caplog):
        messages = self._startup_messages(caplog, Settings(app_password="pw"))
        assert "config.development_signing_secret" not in messages


def test_app_version_from_settings():
    app = create_app(Settings(app_version="9.9.9"))
    assert app.version == "9.9.9"
