"""
Todo RBAC Server - RolePermission Database Model

Junction table for the many-to-many relationship between roles and permissions.
Rows for a role are always replaced as a whole, never edited one by one.
"""

from sqlalchemy import Column, Integer, ForeignKey

from models.database.base import Base


class RolePermission(Base):
    """
    RolePermissions junction table - maps roles to permissions (many-to-many)
    """
    __tablename__ = "role_permissions"

    role_id = Column(Integer, ForeignKey("roles.role_id", ondelete="CASCADE"), primary_key=True)
    permission_id = Column(Integer, ForeignKey("permissions.permission_id", ondelete="CASCADE"), primary_key=True)
