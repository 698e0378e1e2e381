"""git-sync reloader adapter — FastAPI application factory + lifespan.

This module implements:
  - create_app() — testable application factory
  - lifespan     — @asynccontextmanager startup/shutdown sequence
  - /health      — delegated to gitsync_adapter/health.py
  - /webhook/... — delegated to gitsync_adapter/webhook/router.py
  - /            — service discovery root
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config() (unless a Config was passed to create_app)
                             → app.state.config
  2. startup_allowlist()     → app.state.allowlist (immutable from here on)
  3. create_resource_store() → app.state.store
  4. WebhookHandler(...)     → app.state.webhook_handler
  5. app.state.ready = True

Steps 2 and 3 raise ConfigError on a bad allowlist or unusable cluster
credentials; the error propagates out of the lifespan and the server never
starts accepting requests.

Shutdown: app.state.ready = False → close the resource store.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from gitsync_adapter.config import Config, load_config, startup_allowlist
from gitsync_adapter.health import router as health_router
from gitsync_adapter.store.factory import create_resource_store
from gitsync_adapter.utils.logger import configure_from_env, get_logger
from gitsync_adapter.webhook.handler import WebhookHandler
from gitsync_adapter.webhook.middleware import RequestIdMiddleware
from gitsync_adapter.webhook.router import router as webhook_router

# ─── Logging Setup ────────────────────────────────────────────────────────────

configure_from_env()
logger = get_logger(__name__)


root_router = APIRouter(tags=["root"])


# ─── Dependencies ─────────────────────────────────────────────────────────────


async def require_ready(request: Request) -> None:
    """FastAPI dependency: raises HTTP 503 if app.state.ready is not True.

    The webhook route consumes this dependency. /health handles the 503 case
    itself to return a richer body.
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "git-sync adapter is starting up...",
            },
        )


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "git-sync-reloader-adapter",
        "webhook": "PATCH /webhook/{namespace}/{name}",
        "health": "/health",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("git-sync adapter starting up...")

    # ── Step 1: configuration ─────────────────────────────────────────────────
    config: Optional[Config] = getattr(app.state, "config", None)
    if config is None:
        config = load_config()
        app.state.config = config

    # ── Step 2: allowlist (fatal on malformed or empty) ───────────────────────
    allowlist = startup_allowlist(config)
    app.state.allowlist = allowlist
    logger.info(
        "Allowlist loaded",
        count=len(allowlist),
        configmaps=[str(ref) for ref in allowlist],
    )

    # ── Step 3: resource store (fatal on missing credentials) ─────────────────
    store = await create_resource_store(config)
    app.state.store = store

    # ── Step 4: webhook handler ───────────────────────────────────────────────
    app.state.webhook_handler = WebhookHandler(
        allowlist,
        store,
        field_manager=config.kubernetes.field_manager,
    )

    # ── Step 5: ready ─────────────────────────────────────────────────────────
    app.state.ready = True
    logger.info(
        "Webhook adapter ready",
        host=config.server.host,
        port=config.server.port,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────────
    logger.info("git-sync adapter shutting down...")
    app.state.ready = False

    try:
        await store.close()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Resource store close error (non-fatal)", error=str(exc))

    logger.info("git-sync adapter shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the adapter FastAPI application.

    Args:
        config: Pre-loaded Config (run.py passes the CLI-merged one). When
                None, the lifespan calls load_config() itself.

    Returns:
        Configured FastAPI application with lifespan, routers, and middleware.
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="git-sync reloader adapter",
        description="Webhook adapter connecting git-sync with Stakater Reloader",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    # ready=False until the lifespan finishes; /health and the webhook return 503.
    application.state.ready = False
    application.state.config = config

    application.add_middleware(RequestIdMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(webhook_router, dependencies=[Depends(require_ready)])

    # Global exception handlers
    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────
#   uvicorn gitsync_adapter.main:app --host 0.0.0.0 --port 8080

app = create_app()
