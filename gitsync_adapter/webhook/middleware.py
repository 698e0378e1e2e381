"""Request ID middleware.

Assigns a ULID to every inbound request, binds it into the logging context
(``request_id`` on every log line emitted while the request is handled) and
echoes it in the ``X-Request-ID`` response header so an operator can match
a git-sync error to the adapter's log entry.

An incoming ``X-Request-ID`` is ignored: ids are always minted here.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from gitsync_adapter.constants import REQUEST_ID_HEADER
from gitsync_adapter.utils.logger import bind_request_id, clear_request_id
from gitsync_adapter.utils.ulid import generate_ulid


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a ULID for log correlation.

    Registration (in create_app() in gitsync_adapter/main.py):
        application.add_middleware(RequestIdMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = generate_ulid()
        request.state.request_id = request_id
        bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
