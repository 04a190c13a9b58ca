from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..config import Settings
from ..service import session_service
from .models import ErrorResponse, SessionResponse

router = APIRouter()


@router.post(
    "/api/session",
    response_model=SessionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body"},
        401: {"model": ErrorResponse, "description": "Missing, wrong or expired credentials"},
        403: {"model": ErrorResponse, "description": "Invalid session token"},
        500: {"model": ErrorResponse, "description": "Session token could not be validated"},
    },
    summary="Mint or renew a realtime session token",
)
async def create_session(request: Request) -> JSONResponse:
    """Mint a token for Basic credentials, or re-validate a Bearer token."""
    settings: Settings = request.app.state.settings
    outcome = session_service.handle_session_request(
        authorization=request.headers.get("authorization"),
        content_type=request.headers.get("content-type"),
        body=await request.body(),
        settings=settings,
    )
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
