"""
Todo RBAC Server - Role Management API Models

Pydantic models for role and permission endpoints.
"""

from typing import Optional, List
from pydantic import BaseModel


class SetRolePermissionsRequest(BaseModel):
    """Request model for replacing a role's permissions"""
    permissions: List[str]


class RoleSummary(BaseModel):
    """Role with its current permission names"""
    role_id: int
    role_name: str
    description: Optional[str] = None
    permissions: List[str] = []
    user_count: int = 0


class PermissionSummary(BaseModel):
    """A single entry of the permission vocabulary"""
    permission_id: int
    permission_name: str
    description: Optional[str] = None
