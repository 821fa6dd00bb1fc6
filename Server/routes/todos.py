"""
Todo RBAC Server - Todo Endpoints

CRUD endpoints for todos. Single-todo endpoints are guarded by an own/any
permission pair; listing narrows its query to what the caller may read.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from auth import GetCurrentIdentity, RequireOwnedTodo, RequirePermissions
from database import GetDbSession
from errors import ApiError, ErrorKind
from models.api import CreateTodoRequest, TodoListResponse, TodoResponse, UpdateTodoRequest
from models.database import Todo
from models.infrastructure import IdentityContext
from permissions import (
    HasCapability,
    TODO_CREATE,
    TODO_DELETE_ANY,
    TODO_DELETE_OWN,
    TODO_READ_ANY,
    TODO_READ_OWN,
    TODO_UPDATE_ANY,
    TODO_UPDATE_OWN,
)


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()

# Columns a PATCH may not clear
REQUIRED_FIELDS = {"title", "status"}


@router.get("/api/todos", response_model=TodoListResponse, tags=["Todos"])
def list_todos(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    identity: IdentityContext = Depends(GetCurrentIdentity),
    db_session: Session = Depends(GetDbSession)
):
    """
    List todos visible to the caller

    'todo:read:any' sees every todo, 'todo:read:own' only the caller's.

    Args:
        status_filter: Optional status to filter on
        limit: Page size
        offset: Number of todos to skip

    Returns:
        TodoListResponse: Page of todos and the total count
    """
    query = db_session.query(Todo)

    if not HasCapability(identity.permissions, TODO_READ_ANY):
        if not HasCapability(identity.permissions, TODO_READ_OWN):
            raise ApiError(ErrorKind.INSUFFICIENT_CAPABILITY, "Insufficient permissions to read todos")
        query = query.filter(Todo.user_id == identity.user_id)

    if status_filter:
        query = query.filter(Todo.status == status_filter)

    total = query.count()
    todos = (
        query.options(joinedload(Todo.user))
        .order_by(Todo.created_at.desc(), Todo.todo_id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )

    return TodoListResponse(
        todos=[TodoResponse.model_validate(todo) for todo in todos],
        total=total,
        limit=limit,
        offset=offset
    )


@router.post("/api/todos", response_model=TodoResponse, status_code=status.HTTP_201_CREATED, tags=["Todos"])
def create_todo(
    todo_request: CreateTodoRequest,
    identity: IdentityContext = Depends(RequirePermissions(TODO_CREATE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    Create a todo owned by the caller

    Args:
        todo_request: Todo fields

    Returns:
        TodoResponse: The created todo
    """
    try:
        todo = Todo(
            title=todo_request.title,
            description=todo_request.description,
            status=todo_request.status,
            due_date=todo_request.due_date,
            user_id=identity.user_id
        )
        db_session.add(todo)
        db_session.commit()
        db_session.refresh(todo)

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error creating todo for user '{identity.username}': {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' created todo {todo.todo_id}")

    return TodoResponse.model_validate(todo)


@router.get("/api/todos/{todo_id}", response_model=TodoResponse, tags=["Todos"])
def get_todo(todo: Todo = Depends(RequireOwnedTodo(TODO_READ_OWN, TODO_READ_ANY))):
    """
    Get a single todo

    Returns:
        TodoResponse: The todo
    """
    return TodoResponse.model_validate(todo)


@router.patch("/api/todos/{todo_id}", response_model=TodoResponse, tags=["Todos"])
def update_todo(
    todo_request: UpdateTodoRequest,
    todo: Todo = Depends(RequireOwnedTodo(TODO_UPDATE_OWN, TODO_UPDATE_ANY)),
    identity: IdentityContext = Depends(GetCurrentIdentity),
    db_session: Session = Depends(GetDbSession)
):
    """
    Update fields of a todo; the owner never changes

    Args:
        todo_request: Fields to change (omitted fields are left as they are)

    Returns:
        TodoResponse: The updated todo
    """
    changes = todo_request.model_dump(exclude_unset=True)

    try:
        for field_name, value in changes.items():
            if value is None and field_name in REQUIRED_FIELDS:
                continue
            setattr(todo, field_name, value)
        db_session.commit()
        db_session.refresh(todo)

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error updating todo {todo.todo_id}: {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' updated todo {todo.todo_id}: {sorted(changes)}")

    return TodoResponse.model_validate(todo)


@router.delete("/api/todos/{todo_id}", tags=["Todos"])
def delete_todo(
    todo: Todo = Depends(RequireOwnedTodo(TODO_DELETE_OWN, TODO_DELETE_ANY)),
    identity: IdentityContext = Depends(GetCurrentIdentity),
    db_session: Session = Depends(GetDbSession)
):
    """
    Delete a todo

    Returns:
        dict: Confirmation message
    """
    todo_id = todo.todo_id

    try:
        db_session.delete(todo)
        db_session.commit()

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error deleting todo {todo_id}: {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' deleted todo {todo_id}")

    return {"message": "Todo deleted successfully"}
