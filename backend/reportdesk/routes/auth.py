"""
ReportDesk Backend — Auth Route Handlers
==========================================

    POST /api/auth/register   create an account (role 'user')
    POST /api/auth/login      exchange credentials for a bearer token
    GET  /api/auth/me         the authenticated user

Register and login are covered by the auth rate limiter (middleware).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.database import get_db_session
from reportdesk.middleware.auth import get_current_user
from reportdesk.models.user import User
from reportdesk.schemas.common import ErrorResponse
from reportdesk.schemas.user import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from reportdesk.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        409: {"description": "Username or email taken", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    user = await auth_service.register(
        db=db,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return RegisterResponse(
        message="User registered successfully",
        user=UserOut.model_validate(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing field", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    token, user = await auth_service.login(db=db, username=body.username, password=body.password)
    return LoginResponse(
        message="Login successful",
        token=token,
        user=UserOut.model_validate(user),
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Current user",
)
async def me(current_user: User = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserOut.model_validate(current_user))
