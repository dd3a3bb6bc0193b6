"""
ReportDesk Backend — Admin Route Handlers
===========================================

All routes require an admin bearer token (require_admin).

    GET    /api/admin/users             list users, newest first
    PUT    /api/admin/users/{id}/role   change a user's role
    DELETE /api/admin/users/{id}        delete a user
    GET    /api/admin/stats             dashboard counters
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.database import get_db_session
from reportdesk.middleware.auth import require_admin
from reportdesk.models.user import User
from reportdesk.schemas.common import ErrorResponse, MessageResponse
from reportdesk.schemas.user import (
    RoleUpdateRequest,
    StatsResponse,
    UserListResponse,
    UserMutationResponse,
)
from reportdesk.services.user_service import user_service

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        403: {"description": "Not an admin", "model": ErrorResponse},
    },
)


@router.get("/users", response_model=UserListResponse, summary="List all users")
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    users = await user_service.list_users(db)
    return UserListResponse(users=users, count=len(users))


@router.put(
    "/users/{user_id}/role",
    response_model=UserMutationResponse,
    responses={
        400: {"description": "Invalid role or own account", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Change a user's role",
)
async def change_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> UserMutationResponse:
    user = await user_service.change_role(db=db, user_id=user_id, role=body.role, actor=admin)
    return UserMutationResponse(message=f"Role of {user.username} set to {user.role}", user=user)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Attempt to delete own account", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    email = await user_service.delete_user(db=db, user_id=user_id, actor=admin)
    return MessageResponse(message=f"User {email} deleted successfully")


@router.get("/stats", response_model=StatsResponse, summary="Admin dashboard statistics")
async def get_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> StatsResponse:
    return await user_service.get_stats(db)
