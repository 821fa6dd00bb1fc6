"""
Todo RBAC Server - Role Database Model

A role is a named collection of permissions. Every user holds exactly one role.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from models.database.base import Base


class Role(Base):
    """
    Roles table - stores role definitions for RBAC
    """
    __tablename__ = "roles"

    role_id = Column(Integer, primary_key=True, autoincrement=True)
    role_name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    users = relationship("User", back_populates="role")
    # Read-only view; see RoleRegistry.AssignPermissionsToRole for writes
    permissions = relationship("Permission", secondary="role_permissions", back_populates="roles", viewonly=True)

    def __repr__(self):
        return f"<Role {self.role_name}>"
