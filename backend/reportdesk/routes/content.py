"""
ReportDesk Backend — Page Content Route Handlers
==================================================

    GET    /api/content/admin/all              admin: every page (summary)
    POST   /api/content/page                   admin: create page
    GET    /api/content/{page_name}            public: active page
    GET    /api/content/{page_name}/history    admin: version snapshots
    PUT    /api/content/{page_name}            admin: versioned update
    DELETE /api/content/{page_name}            admin: delete page

Caching:
    The public fetch sends `Cache-Control: public, max-age=N`
    (settings.content_cache_max_age). Readers may see a page up to N seconds
    stale after an edit. Admin responses are `no-store`.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.config import settings
from reportdesk.database import get_db_session
from reportdesk.middleware.auth import require_admin
from reportdesk.models.user import User
from reportdesk.schemas.common import ErrorResponse
from reportdesk.schemas.content import (
    ContentMessageResponse,
    PageCreateRequest,
    PageHistoryResponse,
    PageListResponse,
    PageResponse,
    PageUpdateRequest,
)
from reportdesk.services.content_service import content_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/content", tags=["Content"])

NO_STORE = "no-store"


# Literal paths are registered before /{page_name} routes
@router.get(
    "/admin/all",
    response_model=PageListResponse,
    responses={403: {"description": "Not an admin", "model": ErrorResponse}},
    summary="List all pages",
)
async def list_pages(
    response: Response,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PageListResponse:
    response.headers["Cache-Control"] = NO_STORE
    return PageListResponse(data=await content_service.list_pages(db))


@router.post(
    "/page",
    status_code=201,
    response_model=PageResponse,
    responses={
        400: {"description": "Page name or content missing", "model": ErrorResponse},
        409: {"description": "Page name taken", "model": ErrorResponse},
    },
    summary="Create a page",
)
async def create_page(
    body: PageCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PageResponse:
    page = await content_service.create_page(
        db=db,
        page_name=body.page_name,
        content=body.content,
        actor=admin,
        title=body.title,
    )
    return PageResponse(message="Page created successfully", data=page)


@router.get(
    "/{page_name}",
    response_model=PageResponse,
    responses={404: {"description": "No active page with that name", "model": ErrorResponse}},
    summary="Get a page's content",
)
async def get_page(
    page_name: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> PageResponse:
    page = await content_service.get_page(db=db, page_name=page_name)
    if settings.content_cache_max_age > 0:
        response.headers["Cache-Control"] = f"public, max-age={settings.content_cache_max_age}"
    else:
        response.headers["Cache-Control"] = NO_STORE
    return PageResponse(data=page)


@router.get(
    "/{page_name}/history",
    response_model=PageHistoryResponse,
    responses={404: {"description": "Page not found", "model": ErrorResponse}},
    summary="Version history of a page",
)
async def get_history(
    page_name: str,
    response: Response,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PageHistoryResponse:
    response.headers["Cache-Control"] = NO_STORE
    return PageHistoryResponse(data=await content_service.get_history(db=db, page_name=page_name))


@router.put(
    "/{page_name}",
    response_model=PageResponse,
    responses={
        400: {"description": "Content missing", "model": ErrorResponse},
        404: {"description": "Page not found", "model": ErrorResponse},
        409: {"description": "Concurrent update won", "model": ErrorResponse},
    },
    summary="Update a page (creates a history snapshot)",
)
async def update_page(
    page_name: str,
    body: PageUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PageResponse:
    page = await content_service.update_page(
        db=db,
        page_name=page_name,
        content=body.content,
        actor=admin,
        title=body.title,
    )
    return PageResponse(message="Content updated successfully", data=page)


@router.delete(
    "/{page_name}",
    response_model=ContentMessageResponse,
    responses={404: {"description": "Page not found", "model": ErrorResponse}},
    summary="Delete a page",
)
async def delete_page(
    page_name: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ContentMessageResponse:
    await content_service.delete_page(db=db, page_name=page_name, actor=admin)
    return ContentMessageResponse(message="Page deleted successfully")
