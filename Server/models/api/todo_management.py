"""
Todo RBAC Server - Todo Management API Models

Pydantic models for todo endpoints.

Datetimes are stored as naive UTC. Incoming values with an offset are
converted to UTC first; outgoing values are marked as UTC.
"""

from datetime import datetime, timezone
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


def ToStorageDatetime(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC (naive values are taken as UTC)"""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def FromStorageDatetime(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime read from the database"""
    if value is not None and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class CreateTodoRequest(BaseModel):
    """Request model for creating a todo"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: str = Field("open", min_length=1, max_length=50)

    @field_validator("due_date")
    @classmethod
    def NormalizeDueDate(cls, value):
        return ToStorageDatetime(value)


class UpdateTodoRequest(BaseModel):
    """Request model for updating a todo (all fields optional, owner cannot change)"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("due_date")
    @classmethod
    def NormalizeDueDate(cls, value):
        return ToStorageDatetime(value)


class TodoOwner(BaseModel):
    """Owner summary embedded in todo responses"""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    email: str


class TodoResponse(BaseModel):
    """Response model for a single todo"""
    model_config = ConfigDict(from_attributes=True)

    todo_id: int
    title: str
    description: Optional[str] = None
    status: str
    due_date: Optional[datetime] = None
    user_id: int
    created_at: datetime
    updated_at: datetime
    user: Optional[TodoOwner] = None

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def MarkUtc(cls, value):
        return FromStorageDatetime(value)


class TodoListResponse(BaseModel):
    """Response model for todo listings"""
    todos: List[TodoResponse]
    total: int
    limit: int
    offset: int
