from __future__ import annotations

import hashlib
import hmac

__all__ = ["timing_safe_equal"]


def _digest(value: str | bytes) -> bytes:
    if isinstance(value, str):
        value = value.encode("utf-8")
    return hashlib.sha256(value).digest()


def timing_safe_equal(a: str | bytes, b: str | bytes) -> bool:
    """Compare two secrets without leaking where (or whether) lengths differ.

    Both operands are hashed in full to fixed-size digests before the
    constant-time digest comparison, so every byte of each side is consumed
    regardless of length mismatch or the position of the first difference.
    """
    return hmac.compare_digest(_digest(a), _digest(b))
