from __future__ import annotations

import argparse
import os


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="Realtime session gate smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--password", default=os.getenv("APP_PASSWORD", ""))
    parser.add_argument("--username", default="smoke")
    parser.add_argument("--scope", default="practice")
    parser.add_argument("--ttl", type=int, default=None, dest="ttl_seconds")
    parser.add_argument("--timeout", type=float, default=20.0)
    return parser.parse_args(argv)
