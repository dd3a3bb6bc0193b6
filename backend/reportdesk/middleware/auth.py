"""
ReportDesk Backend — Authorization Gate
=========================================

What:  FastAPI dependencies that turn a bearer token into a User row and
       enforce the admin role.
How:   `get_current_user` verifies the token and loads its subject once per
       request (no identity caching across requests). `require_role` is the
       one capability check every admin route goes through.

Usage:
    @router.get("/me")
    async def me(user: User = Depends(get_current_user)): ...

    @router.get("/users")
    async def list_users(admin: User = Depends(require_role(Role.ADMIN))): ...
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.database import get_db_session
from reportdesk.exceptions import ForbiddenError, UnauthorizedError
from reportdesk.models.user import Role, User
from reportdesk.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 envelope, not
# FastAPI's default error
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Authentication token is missing")

    payload = decode_access_token(credentials.credentials)

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedError(message="Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        logger.info("Token for deleted user %s rejected", user_id)
        raise UnauthorizedError(message="User not found")

    # Picked up by the access log
    request.state.user_id = user.id
    return user


def require_role(role: Role) -> Callable:
    """Build a dependency that admits only users holding `role`."""

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role.value:
            raise ForbiddenError(message=f"Requires role: {role.value}")
        return current_user

    return checker


require_admin = require_role(Role.ADMIN)
