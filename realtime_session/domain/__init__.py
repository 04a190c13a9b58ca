"""Pure domain logic: credential gate and session tokens.

Free of FastAPI/HTTP concerns so both can be unit-tested in isolation and
reused by the smoke runner.
"""
__all__ = ["basic_auth", "compare", "tokens"]
