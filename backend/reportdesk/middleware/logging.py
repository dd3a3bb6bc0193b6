"""
ReportDesk Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request on the `reportdesk.access` logger.
How:   Measures wall time around the downstream app and picks the level from
       the status code: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Line format:
    POST /api/auth/login 401 12.3ms [a1b2c3d4] from 10.0.0.7 user=-

Never logged: request bodies (passwords, page HTML) and Authorization headers.
/health is skipped, it is polled by probes every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from reportdesk.middleware.request_id import request_id_var

logger = logging.getLogger("reportdesk.access")

SKIP_PATHS = {"/health"}


def client_ip_of(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        # Set by get_current_user once the token has been verified
        user_id = getattr(request.state, "user_id", None)
        rid = request_id_var.get("")
        client_ip = client_ip_of(request)

        logger.log(
            level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            user_id if user_id is not None else "-",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": user_id,
            },
        )
        return response
