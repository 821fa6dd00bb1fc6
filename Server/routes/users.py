"""
Todo RBAC Server - User Management Endpoints

Listing users, reassigning roles and deleting accounts. All endpoints
require 'user:manage'.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

import auth
from auth import RequirePermissions
from database import GetDbSession
from errors import ApiError, ErrorKind, RoleNotFoundError, UserNotFoundError
from models.api import UpdateUserRoleRequest, UserRoleInfo, UserSummary
from models.database import User
from models.infrastructure import IdentityContext
from permissions import USER_MANAGE

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


def BuildUserSummary(user: User) -> UserSummary:
    """Convert a User row into its API representation"""
    role = None
    if user.role:
        role = UserRoleInfo(
            role_id=user.role.role_id,
            role_name=user.role.role_name,
            description=user.role.description
        )

    return UserSummary(
        user_id=user.user_id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        role=role
    )


@router.get("/api/users", tags=["Users"])
def list_users(
    identity: IdentityContext = Depends(RequirePermissions(USER_MANAGE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    List all users with their roles

    Returns:
        dict: List of users
    """
    users = db_session.query(User).options(
        joinedload(User.role)
    ).order_by(User.created_at.desc(), User.user_id.desc()).all()

    return {"users": [BuildUserSummary(user) for user in users]}


@router.patch("/api/users/{user_id}/role", tags=["Users"])
def update_user_role(
    user_id: int,
    request_data: UpdateUserRoleRequest,
    identity: IdentityContext = Depends(RequirePermissions(USER_MANAGE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    Assign a different role to a user

    Takes effect on the user's next request; existing tokens stay valid
    but carry the old permission list only as a hint.

    Args:
        user_id: User to update
        request_data: New role ID

    Returns:
        dict: The updated user
    """
    try:
        user = auth.role_registry.ReassignUserRole(db_session, user_id, request_data.role_id)
        db_session.commit()

    except UserNotFoundError:
        db_session.rollback()
        raise ApiError(ErrorKind.RESOURCE_NOT_FOUND, "User not found")
    except RoleNotFoundError:
        db_session.rollback()
        raise ApiError(ErrorKind.RESOURCE_NOT_FOUND, "Role not found")
    except Exception as e:
        db_session.rollback()
        logger.error(f"Error updating role for user {user_id}: {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' assigned role '{user.role.role_name}' to user '{user.username}'")

    return {"user": BuildUserSummary(user)}


@router.delete("/api/users/{user_id}", tags=["Users"])
def delete_user(
    user_id: int,
    identity: IdentityContext = Depends(RequirePermissions(USER_MANAGE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    Delete a user and their todos

    Outstanding tokens for the user stop working on the next request.

    Args:
        user_id: User to delete

    Returns:
        dict: Confirmation message
    """
    if user_id == identity.user_id:
        raise ApiError(ErrorKind.VALIDATION_ERROR, "Cannot delete your own account")

    user = db_session.get(User, user_id)
    if not user:
        raise ApiError(ErrorKind.RESOURCE_NOT_FOUND, "User not found")

    username = user.username

    try:
        db_session.delete(user)
        db_session.commit()

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error deleting user '{username}': {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' deleted user '{username}'")

    return {"message": f"User '{username}' deleted successfully"}
