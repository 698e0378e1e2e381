"""Webhook route — ``PATCH /webhook/{namespace}/{name}``.

git-sync is configured with ``--webhook-url`` pointing here and
``--webhook-method PATCH``; it sends the synced commit hash in the
``Gitsync-Hash`` header.

The route only adapts HTTP to WebhookHandler and projects the outcome back
(see models/responses.py). All decisions are made by the handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from gitsync_adapter.models.responses import build_outcome_response
from gitsync_adapter.webhook.handler import WebhookHandler

router = APIRouter(tags=["webhook"])


@router.patch("/webhook/{namespace}/{name}")
async def handle_webhook(namespace: str, name: str, request: Request) -> Response:
    """Conditionally bump the ``git-sync-hash`` annotation of ``namespace/name``.

    Responses:
      200 {"status": "success", "git_hash": "<hash>", "updated": bool}
      400 (empty) — Gitsync-Hash header missing or unusable
      403 (empty) — ConfigMap not allowlisted
      500 (empty) — Kubernetes read or patch failed
    """
    handler: WebhookHandler = request.app.state.webhook_handler
    outcome = await handler.handle(namespace, name, request.headers)
    return build_outcome_response(outcome)
