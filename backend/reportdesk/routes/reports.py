"""
ReportDesk Backend — Report Route Handlers
============================================

Every route here requires a bearer token. Ownership and status rules live
in ReportService; handlers only translate HTTP to service calls.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.database import get_db_session
from reportdesk.middleware.auth import get_current_user
from reportdesk.models.user import User
from reportdesk.schemas.common import ErrorResponse, MessageResponse
from reportdesk.schemas.report import (
    ReportCreateRequest,
    ReportListResponse,
    ReportMutationResponse,
    ReportResponse,
    ReportUpdateRequest,
)
from reportdesk.services.report_service import report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get(
    "",
    response_model=ReportListResponse,
    responses={
        400: {"description": "Unknown status filter", "model": ErrorResponse},
        401: {"description": "Not authenticated", "model": ErrorResponse},
    },
    summary="List reports, newest first",
)
async def list_reports(
    status: Optional[str] = Query(
        default=None,
        description="Filter: pending, in_progress, resolved or closed",
    ),
    limit: int = Query(default=50, ge=1, le=100, description="Page size (max 100)"),
    offset: int = Query(default=0, ge=0, description="Rows to skip"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReportListResponse:
    reports = await report_service.list_reports(db=db, status=status, limit=limit, offset=offset)
    return ReportListResponse(reports=reports, count=len(reports))


@router.get(
    "/{report_id}",
    response_model=ReportResponse,
    responses={404: {"description": "Report not found", "model": ErrorResponse}},
    summary="Get a single report",
)
async def get_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReportResponse:
    report = await report_service.get_report(db=db, report_id=report_id)
    return ReportResponse(report=report)


@router.post(
    "",
    status_code=201,
    response_model=ReportMutationResponse,
    responses={400: {"description": "Title or description too short", "model": ErrorResponse}},
    summary="File a new report",
)
async def create_report(
    body: ReportCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReportMutationResponse:
    report = await report_service.create_report(
        db=db,
        author=current_user,
        title=body.title,
        description=body.description,
        server_name=body.server_name,
    )
    return ReportMutationResponse(message="Report created successfully", report=report)


@router.put(
    "/{report_id}",
    response_model=ReportMutationResponse,
    responses={
        400: {"description": "Invalid field or nothing to update", "model": ErrorResponse},
        403: {"description": "Not the owner, or non-admin status change", "model": ErrorResponse},
        404: {"description": "Report not found", "model": ErrorResponse},
    },
    summary="Partially update a report",
)
async def update_report(
    report_id: int,
    body: ReportUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ReportMutationResponse:
    report = await report_service.update_report(
        db=db,
        report_id=report_id,
        requester=current_user,
        changes=body.model_dump(exclude_unset=True),
    )
    return ReportMutationResponse(message="Report updated successfully", report=report)


@router.delete(
    "/{report_id}",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Report not found", "model": ErrorResponse},
    },
    summary="Delete a report",
)
async def delete_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await report_service.delete_report(db=db, report_id=report_id, requester=current_user)
    return MessageResponse(message="Report deleted successfully")
