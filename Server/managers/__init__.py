"""
Todo RBAC Server - Managers Package

This package contains manager classes for the database, credentials and
the role/permission registry.
"""

from managers.database_manager import DatabaseManager
from managers.credential_manager import CredentialManager
from managers.role_registry import RoleRegistry

__all__ = ['DatabaseManager', 'CredentialManager', 'RoleRegistry']
