"""Realtime session gate.

Issues and verifies short-lived, scope-bound session tokens behind a single
shared application password.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("realtime-session-gate")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
