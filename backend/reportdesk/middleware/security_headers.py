"""
ReportDesk Backend — Security Headers Middleware
==================================================

Stamps conservative browser-hardening headers on every response. Headers a
route has already set are left alone.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}

HSTS_VALUE = "max-age=15552000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.headers = dict(DEFAULT_HEADERS)
        # HSTS only makes sense behind TLS, i.e. production deployments
        if hsts:
            self.headers["Strict-Transport-Security"] = HSTS_VALUE

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
