"""Health endpoint for the git-sync reloader adapter.

  GET /health — 503 before startup completes, 200 afterwards

Used as the container liveness/readiness probe. ``status`` is ``degraded``
(still HTTP 200) when the Kubernetes API cannot be reached: the process
itself is fine and webhook calls will report 500 until the API recovers.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from gitsync_adapter.store.protocol import ResourceStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200)::

        {
          "status": "ok" | "degraded",
          "store": "healthy" | "error",
          "allowlist_size": 3
        }

    Response body (503)::

        {"status": "starting", "message": "..."}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "git-sync adapter is starting up...",
            },
        )

    store: ResourceStore = request.app.state.store
    store_healthy = await store.health_check()

    return {
        "status": "ok" if store_healthy else "degraded",
        "store": "healthy" if store_healthy else "error",
        "allowlist_size": len(request.app.state.allowlist),
    }
