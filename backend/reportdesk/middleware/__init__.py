# Middleware package init
"""
ReportDesk Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request, plus the auth
       dependencies used by protected routes.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Auth Rate Limit]
            → [Security Headers] → [CORS] → [GZip] → Route Handler

    1. Request ID first so every later log line carries the correlation ID
    2. Logging wraps everything below it, including rate-limit rejections
    3. Auth rate limit only inspects POST /api/auth/login and /register
    4. Security headers are stamped on every response, errors included

Auth (not middleware, FastAPI dependencies):
    auth.get_current_user   bearer token → User
    auth.require_admin      403 unless the user has role 'admin'
"""
