"""
ReportDesk Backend — Report Schemas
=====================================

`ReportUpdateRequest` is a partial update: only the keys present in the
request body are applied (read with `model_dump(exclude_unset=True)`).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReportCreateRequest(BaseModel):
    title: str = Field(description="At least 5 characters")
    description: str = Field(description="At least 10 characters")
    server_name: Optional[str] = Field(default=None, max_length=100)


class ReportUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    server_name: Optional[str] = Field(default=None, max_length=100)
    status: Optional[str] = Field(
        default=None,
        description="pending, in_progress, resolved, closed (admin only)",
    )


class ReportOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    server_name: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_username: Optional[str] = None

    model_config = {"from_attributes": True}


class ReportListResponse(BaseModel):
    reports: List[ReportOut]
    count: int = Field(description="Number of reports in this page")


class ReportResponse(BaseModel):
    report: ReportOut


class ReportMutationResponse(BaseModel):
    message: str
    report: ReportOut
