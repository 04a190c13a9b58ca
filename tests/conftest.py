from __future__ import annotations

import base64
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from realtime_session.config import Settings
from realtime_session.main import create_app

APP_PASSWORD = "correct-password"
SIGNING_SECRET = "test-secret"


def basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


@pytest.fixture
def settings() -> Settings:
    return Settings(app_password=APP_PASSWORD, session_secret=SIGNING_SECRET)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
