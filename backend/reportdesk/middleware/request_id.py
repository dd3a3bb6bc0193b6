"""
ReportDesk Backend — Request ID Middleware
============================================

What:  Assigns a correlation ID to every request and echoes it back in the
       X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID, otherwise generates a short
       UUID. The ID is stored in a ContextVar (read by the access logger and
       the error handlers) and on request.state (read by route handlers).

Every error envelope carries the same ID in its `request_id` field, so a
user-visible error can be matched to the server log line.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Client IDs are capped so a hostile header can't flood the logs
        rid = request.headers.get(REQUEST_ID_HEADER, "")[:64] or new_request_id()

        # Not reset afterwards: the outermost 500 handler still needs it
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
