"""
Todo RBAC Server - Database Models Package

This package contains all SQLAlchemy database model definitions.
All models share a common declarative base for proper table relationships.
"""

from models.database.base import Base

from models.database.role import Role
from models.database.permission import Permission
from models.database.role_permission import RolePermission
from models.database.user import User
from models.database.todo import Todo

__all__ = [
    'Base',
    'Role',
    'Permission',
    'RolePermission',
    'User',
    'Todo',
]
