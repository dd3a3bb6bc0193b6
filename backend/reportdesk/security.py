"""
ReportDesk Backend — Password Hashing & Access Tokens
=======================================================

What:  bcrypt password hashing and JWT issue/verify helpers.
Who:   auth_service (register/login), the auth dependency (every protected
       request) and scripts/create_admin.py.

Token claims:
    sub   user id (string, per RFC 7519)
    role  role at issue time (informational; the gate re-reads the user row)
    exp   expiry, settings.jwt_expires_minutes after issue
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from reportdesk.config import settings
from reportdesk.exceptions import UnauthorizedError


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash, or input longer than bcrypt accepts
        return False


_dummy_hash: Optional[str] = None


def verify_dummy_password(password: str) -> bool:
    """Run a full bcrypt check against a throwaway hash; always False."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("reportdesk-dummy-password")
    verify_password(password, _dummy_hash)
    return False


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed, time-limited bearer token for `user_id`."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expires_minutes)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        UnauthorizedError: expired, tampered or otherwise unreadable token
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError(message="Token has expired")
    except JWTError:
        raise UnauthorizedError(message="Invalid token")
