"""FastAPI app factory: health endpoint and the session token route."""
from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .api.routes import router as session_router
from .config import Settings
from .logging_conf import get_logger, setup_logging

logger = get_logger("realtime_session")


def warn_on_insecure_config(settings: Settings) -> None:
    """Log a warning for each configuration gap that is only tolerable in local dev."""
    if not settings.app_password:
        logger.warning(
            "config.no_app_password",
            extra={"event": "config_no_app_password"},
        )
    if settings.uses_development_secret:
        # Public fallback key: fine for local dev, never for a deployment.
        logger.warning(
            "config.development_signing_secret",
            extra={"event": "config_development_signing_secret"},
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("startup", extra={"event": "startup"})
        warn_on_insecure_config(settings)
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    app = FastAPI(
        title="Realtime Session Gate",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """JSON request logging with a correlation id.

        Reuses an incoming X-Request-ID or mints one, and echoes it back.
        Headers are never logged; they carry credentials.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.get("/health", summary="Liveness/readiness check")
    async def health() -> JSONResponse:
        return JSONResponse(content={"ok": True})

    app.include_router(session_router)

    return app


# ASGI entrypoint for uvicorn: `uvicorn realtime_session.main:app --port 8000`
app = create_app()
