"""
ReportDesk Backend — User & Auth Schemas
==========================================

Request bodies for register/login/role change and the public user shape.
Business rules (lengths, email format, allowed roles) are checked in the
services so they answer 400 with a specific message; these models only
require that the fields are present and are strings.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(description="At least 3 characters")
    email: str = Field(description="Valid email address")
    password: str = Field(description="At least 6 characters")


class LoginRequest(BaseModel):
    username: str
    password: str


class RoleUpdateRequest(BaseModel):
    role: str = Field(description="'user' or 'admin'")


class UserOut(BaseModel):
    """Public view of a user; never carries the password hash."""
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user: UserOut


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str = Field(description="Bearer token for the Authorization header")
    user: UserOut


class CurrentUserResponse(BaseModel):
    user: UserOut


class UserListResponse(BaseModel):
    users: List[UserOut]
    count: int


class UserMutationResponse(BaseModel):
    message: str
    user: UserOut


class StatsResponse(BaseModel):
    total_users: int
    total_admins: int
    total_reports: int
    reports_by_status: dict = Field(description="status → number of reports")
    total_pages: int
