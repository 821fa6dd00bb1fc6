"""
Todo RBAC Server - User Database Model

User model for authentication and authorization.
Stores credentials and the single role assignment. Permissions are never
stored on the user row; they are always derived from the current role.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.database.base import Base


class User(Base):
    """
    Users table - stores user credentials and role assignment
    """
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role_id = Column(Integer, ForeignKey("roles.role_id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    role = relationship("Role", back_populates="users")
    # Todos go away with their owner
    todos = relationship("Todo", back_populates="user", cascade="all, delete-orphan")

    # Never reuse a deleted user's id; outstanding tokens name users by id
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<User {self.username}>"
