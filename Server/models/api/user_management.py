"""
Todo RBAC Server - User Management API Models

Pydantic models for user management endpoints.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UpdateUserRoleRequest(BaseModel):
    """Request model for updating a user's role"""
    role_id: int = Field(..., ge=1)


class UserRoleInfo(BaseModel):
    """Role summary embedded in user listings"""
    role_id: int
    role_name: str
    description: Optional[str] = None


class UserSummary(BaseModel):
    """Response model for a user in admin listings"""
    user_id: int
    username: str
    email: str
    created_at: Optional[datetime] = None
    role: Optional[UserRoleInfo] = None
