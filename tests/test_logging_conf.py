from __future__ import annotations

import json
import logging

from realtime_session.logging_conf import REDACTED, JsonFormatter, setup_logging


def _record(msg, **extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


def test_formats_message_and_extras():
    out = json.loads(JsonFormatter().format(_record("session.mint", event="session_mint", scope="practice")))
    assert out["level"] == "INFO"
    assert out["logger"] == "test"
    assert out["message"] == "session.mint"
    assert out["event"] == "session_mint"
    assert out["scope"] == "practice"


def test_redacts_credentials():
    out = json.loads(
        JsonFormatter().format(_record("oops", token="abc.def.ghi", password="hunter2", authorization="Basic x"))
    )
    assert out["token"] == REDACTED
    assert out["password"] == REDACTED
    assert out["authorization"] == REDACTED


def test_dict_messages_are_merged():
    out = json.loads(JsonFormatter().format(_record({"event": "custom", "count": 2})))
    assert out["event"] == "custom"
    assert out["count"] == 2
    assert "message" not in out


def test_setup_logging_ignores_environment(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    setup_logging()

    assert root.level == logging.INFO
    assert isinstance(root.handlers[0].formatter, JsonFormatter)


def test_setup_logging_uses_given_level(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    setup_logging("warning")

    assert root.level == logging.WARNING
