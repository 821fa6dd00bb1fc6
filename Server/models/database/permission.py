"""
Todo RBAC Server - Permission Database Model

A permission is an opaque capability name such as 'todo:update:own'.
Names are unique and never renamed once created.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from models.database.base import Base


class Permission(Base):
    """
    Permissions table - stores the capability vocabulary
    """
    __tablename__ = "permissions"

    permission_id = Column(Integer, primary_key=True, autoincrement=True)
    permission_name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)

    # Read-only view; associations are written through RolePermission rows
    roles = relationship("Role", secondary="role_permissions", back_populates="permissions", viewonly=True)

    def __repr__(self):
        return f"<Permission {self.permission_name}>"
