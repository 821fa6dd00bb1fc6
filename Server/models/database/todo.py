"""
Todo RBAC Server - Todo Database Model

The protected resource. Each todo has exactly one owner (user_id) which
never changes after creation.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.database.base import Base


class Todo(Base):
    """
    Todos table - tasks owned by users
    """
    __tablename__ = "todos"

    todo_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="open")
    due_date = Column(DateTime, nullable=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    user = relationship("User", back_populates="todos")

    __table_args__ = (
        # Listing own todos filters by owner, optionally by status
        Index('idx_todos_user_status', 'user_id', 'status'),
        {"sqlite_autoincrement": True},
    )
