"""
ReportDesk Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       JSON error responses with the status code listed below.
Who:   Raised by services and auth dependencies; caught by global handlers.

Exception Hierarchy:
    ReportDeskError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error

The context dict is logged server-side and only echoed to clients when the
service runs with ENVIRONMENT=development.
"""

from typing import Any, Dict, Optional


class ReportDeskError(Exception):
    """
    Base exception for all ReportDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, hidden outside development)
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ReportDeskError):
    """
    Raised when client input fails a business rule.

    When:  Missing registration fields, short passwords, malformed email,
           too-short report titles, unknown status or role values, empty
           page content, an admin acting on their own account.
    HTTP:  400 Bad Request (FastAPI body-schema failures are mapped to 400 too)
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(ReportDeskError):
    """
    Raised when the caller is not authenticated.

    When:  No bearer token, a token with a bad signature or past its expiry,
           a token whose user no longer exists, or a failed login. Login
           failures always use the same message so usernames can't be probed.
    HTTP:  401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    status_code = 401
    code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ReportDeskError):
    """
    Raised when an authenticated user lacks the privilege for an action.

    When:  Non-admin on an admin route, editing someone else's report, or a
           non-admin trying to change a report's status.
    HTTP:  403 Forbidden
    """

    status_code = 403
    code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ReportDeskError):
    """
    Raised when a referenced entity does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so the handler can answer 404.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(ReportDeskError):
    """
    Raised when a write would break a uniqueness rule.

    When:  Username/email already registered, page name already taken, or a
           content update lost the race against a concurrent update.
    HTTP:  409 Conflict
    """

    status_code = 409
    code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ReportDeskError):
    """
    Raised when a client exceeds the per-IP limit on login/register.

    HTTP:  429 Too Many Requests (with Retry-After)
    """

    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many authentication attempts. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(ReportDeskError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; the SQL error is
    only logged (and echoed in development).
    HTTP:  500 Internal Server Error
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
