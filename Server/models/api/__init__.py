"""
Todo RBAC Server - API Models Package

This package contains Pydantic models for all API endpoints.
"""

from models.api.todo_management import (
    CreateTodoRequest,
    UpdateTodoRequest,
    TodoOwner,
    TodoResponse,
    TodoListResponse
)
from models.api.user_management import (
    UpdateUserRoleRequest,
    UserRoleInfo,
    UserSummary
)
from models.api.role_management import (
    SetRolePermissionsRequest,
    RoleSummary,
    PermissionSummary
)

__all__ = [
    'CreateTodoRequest',
    'UpdateTodoRequest',
    'TodoOwner',
    'TodoResponse',
    'TodoListResponse',
    'UpdateUserRoleRequest',
    'UserRoleInfo',
    'UserSummary',
    'SetRolePermissionsRequest',
    'RoleSummary',
    'PermissionSummary',
]
