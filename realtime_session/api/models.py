from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class SessionRequest(BaseModel):
    """Optional inputs for minting a session token."""
    scope: str = Field("practice", min_length=1)
    ttlSeconds: Optional[int] = Field(None, ge=1, le=600)

    @field_validator("ttlSeconds", mode="before")
    @classmethod
    def _json_integer(cls, v: Any) -> int:
        # Any JSON number with no fractional part counts; an explicit null
        # does not mean "use the default".
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("Expected number")
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError("Expected integer")
            return int(v)
        return v

    @field_validator("scope")
    @classmethod
    def _scope_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("scope must not be blank")
        return v


class SessionResponse(BaseModel):
    """A usable session token, identical for minted and renewed tokens."""
    token: str = Field(..., min_length=1)
    expiresAt: str
    scope: str = Field(..., min_length=1)

    @field_validator("expiresAt")
    @classmethod
    def _iso_timestamp(cls, v: str) -> str:
        try:
            datetime.fromisoformat(v)
        except ValueError as e:
            raise ValueError("expiresAt must be an ISO timestamp") from e
        return v


class ValidationIssue(BaseModel):
    """One field-level problem with a request body."""
    path: list[Any]
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for every non-200 outcome."""
    error: str
    issues: Optional[list[ValidationIssue]] = None
