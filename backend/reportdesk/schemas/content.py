"""
ReportDesk Backend — Page Content Schemas
===========================================

The content API wraps every payload as {"success": true, "data": ...}, which
the front-end content editor expects.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PageCreateRequest(BaseModel):
    page_name: Optional[str] = Field(default=None, alias="pageName", max_length=100)
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None

    model_config = {"populate_by_name": True}


class PageUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None


class PageOut(BaseModel):
    id: int
    page_name: str
    title: Optional[str] = None
    content: str
    version: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PageSummary(BaseModel):
    id: int
    page_name: str
    title: Optional[str] = None
    is_active: bool
    version: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PageHistoryEntry(BaseModel):
    id: int
    version: int
    content_text: str
    created_at: datetime
    created_by: Optional[str] = Field(default=None, description="Username of the editor")


class PageResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: PageOut


class PageListResponse(BaseModel):
    success: bool = True
    data: List[PageSummary]


class PageHistoryResponse(BaseModel):
    success: bool = True
    data: List[PageHistoryEntry]


class ContentMessageResponse(BaseModel):
    success: bool = True
    message: str
