"""
Todo RBAC Server - Role Endpoints

Listing roles and the permission vocabulary, and replacing a role's
permissions.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import auth
from auth import GetCurrentIdentity, RequirePermissions
from database import GetDbSession
from errors import ApiError, ErrorKind
from models.api import PermissionSummary, RoleSummary, SetRolePermissionsRequest
from models.database import Role
from models.infrastructure import IdentityContext
from permissions import ROLE_MANAGE

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


@router.get("/api/roles", tags=["Roles"])
def list_roles(
    identity: IdentityContext = Depends(GetCurrentIdentity),
    db_session: Session = Depends(GetDbSession)
):
    """
    List all roles with their permissions

    Returns:
        dict: List of roles
    """
    registry = auth.role_registry
    user_counts = registry.GetUserCountsByRole(db_session)
    roles = [
        RoleSummary(
            role_id=role.role_id,
            role_name=role.role_name,
            description=role.description,
            permissions=registry.GetRolePermissions(db_session, role_id=role.role_id),
            user_count=user_counts.get(role.role_id, 0)
        )
        for role in registry.GetAllRoles(db_session)
    ]

    return {"roles": roles}


@router.get("/api/permissions", tags=["Roles"])
def list_permissions(
    identity: IdentityContext = Depends(RequirePermissions(ROLE_MANAGE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    List the permission vocabulary

    Returns:
        dict: List of permissions
    """
    permissions = [
        PermissionSummary(
            permission_id=permission.permission_id,
            permission_name=permission.permission_name,
            description=permission.description
        )
        for permission in auth.role_registry.GetAllPermissions(db_session)
    ]

    return {"permissions": permissions}


@router.put("/api/roles/{role_id}/permissions", tags=["Roles"])
def set_role_permissions(
    role_id: int,
    request_data: SetRolePermissionsRequest,
    identity: IdentityContext = Depends(RequirePermissions(ROLE_MANAGE)),
    db_session: Session = Depends(GetDbSession)
):
    """
    Set permissions for a role (replaces all existing permissions)

    Unlike seeding, unknown permission names are refused here instead of
    being skipped.

    Args:
        role_id: Role ID to set permissions for
        request_data: Permissions list

    Returns:
        dict: The role and its new permissions
    """
    registry = auth.role_registry

    role = db_session.get(Role, role_id)
    if not role:
        raise ApiError(ErrorKind.RESOURCE_NOT_FOUND, "Role not found")

    valid_permission_names = {p.permission_name for p in registry.GetAllPermissions(db_session)}
    unknown = [name for name in request_data.permissions if name not in valid_permission_names]
    if unknown:
        raise ApiError(ErrorKind.VALIDATION_ERROR, f"Permission '{unknown[0]}' does not exist")

    try:
        assigned = registry.AssignPermissionsToRole(db_session, role.role_name, request_data.permissions)
        db_session.commit()

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error setting permissions for role '{role.role_name}': {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' set permissions for role '{role.role_name}': {assigned}")

    return {
        "role_id": role.role_id,
        "role_name": role.role_name,
        "permissions": assigned
    }
