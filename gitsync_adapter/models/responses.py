"""HTTP response builders for webhook outcomes.

``build_outcome_response()`` is a direct projection of WebhookOutcome:

  UPDATED / ALREADY_CURRENT → 200, JSON body
  FORBIDDEN                 → 403, empty body
  MISSING_HASH              → 400, empty body
  UPSTREAM_FAILURE          → 500, empty body

Failure responses deliberately carry no body: a caller outside the allowlist
must not learn whether a ConfigMap exists, and store errors are reported to
operators through logs, not to git-sync.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse, Response

from gitsync_adapter.models.outcome import OutcomeKind, WebhookOutcome

_STATUS_BY_KIND: dict[OutcomeKind, int] = {
    OutcomeKind.UPDATED: 200,
    OutcomeKind.ALREADY_CURRENT: 200,
    OutcomeKind.FORBIDDEN: 403,
    OutcomeKind.MISSING_HASH: 400,
    OutcomeKind.UPSTREAM_FAILURE: 500,
}


def build_success_response(outcome: WebhookOutcome) -> JSONResponse:
    """Build the 200 response for UPDATED / ALREADY_CURRENT.

    Body::

        {"status": "success", "git_hash": "<hash>", "updated": true|false}
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "success",
            "git_hash": outcome.git_hash,
            "updated": outcome.updated_flag,
        },
    )


def build_outcome_response(outcome: WebhookOutcome) -> Response:
    """Map any WebhookOutcome to its HTTP response."""
    if outcome.is_success:
        return build_success_response(outcome)
    return Response(status_code=_STATUS_BY_KIND[outcome.kind])
