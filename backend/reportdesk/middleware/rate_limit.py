"""
ReportDesk Backend — Auth Rate Limiting Middleware
====================================================

What:  Per-IP sliding-window limit on the credential endpoints
       (POST /api/auth/login and POST /api/auth/register).
Why:   Slows password guessing and bulk account creation. Other routes are
       not limited.
How:   Each IP keeps a list of request timestamps; entries older than the
       window are dropped on every hit. At the limit the request is answered
       with 429, the standard error envelope and a Retry-After header.

Defaults (settings): 20 requests per 900 s window.

The counters live in process memory, so each worker process enforces its
own limit.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from reportdesk.config import settings
from reportdesk.exceptions import RateLimitExceededError
from reportdesk.middleware.logging import client_ip_of
from reportdesk.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_PATHS: FrozenSet[str] = frozenset({"/api/auth/login", "/api/auth/register"})


class AuthRateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        paths: FrozenSet[str] = LIMITED_PATHS,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.auth_rate_limit_requests
        self.window_seconds = window_seconds or settings.auth_rate_limit_window
        self.paths = paths
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path.rstrip("/") not in self.paths:
            return await call_next(request)

        client_ip = client_ip_of(request)
        now = time.time()
        window_start = now - self.window_seconds

        hits = [ts for ts in self._hits[client_ip] if ts > window_start]
        self._hits[client_ip] = hits

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            logger.warning(
                "Auth rate limit exceeded for %s on %s: %d requests in %ds",
                client_ip,
                request.url.path,
                len(hits),
                self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.message,
                    "code": exc.code,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits.append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive = [
            ip for ip, timestamps in self._hits.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive:
            del self._hits[ip]
        if inactive:
            logger.debug("Dropped %d inactive rate-limit entries", len(inactive))
