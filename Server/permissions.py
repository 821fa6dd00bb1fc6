"""
Todo RBAC Server - Permission Evaluation

This module provides:
- The canonical permission vocabulary and default role definitions
- Pure decision functions over a permission snapshot

Permissions are flat names. Holding 'todo:update:any' does not imply
'todo:update:own'; every name is checked on its own.
"""

from typing import AbstractSet, Iterable, Optional


# ==================== Permission Vocabulary ====================

TODO_CREATE = "todo:create"
TODO_READ_OWN = "todo:read:own"
TODO_READ_ANY = "todo:read:any"
TODO_UPDATE_OWN = "todo:update:own"
TODO_UPDATE_ANY = "todo:update:any"
TODO_DELETE_OWN = "todo:delete:own"
TODO_DELETE_ANY = "todo:delete:any"
USER_MANAGE = "user:manage"
ROLE_MANAGE = "role:manage"

DEFAULT_PERMISSIONS = {
    TODO_CREATE: "Create new todos",
    TODO_READ_OWN: "Read own todos",
    TODO_READ_ANY: "Read any todos",
    TODO_UPDATE_OWN: "Update own todos",
    TODO_UPDATE_ANY: "Update any todos",
    TODO_DELETE_OWN: "Delete own todos",
    TODO_DELETE_ANY: "Delete any todos",
    USER_MANAGE: "Manage users and roles",
    ROLE_MANAGE: "Manage roles and permissions",
}

ADMIN_ROLE = "admin"
STANDARD_USER_ROLE = "standard_user"
VIEWER_ROLE = "viewer"

DEFAULT_ROLES = {
    ADMIN_ROLE: {
        "description": "Administrator with full access",
        "permissions": [
            TODO_CREATE,
            TODO_READ_ANY,
            TODO_UPDATE_ANY,
            TODO_DELETE_ANY,
            USER_MANAGE,
            ROLE_MANAGE,
        ],
    },
    STANDARD_USER_ROLE: {
        "description": "Standard user with access to own todos",
        "permissions": [
            TODO_CREATE,
            TODO_READ_OWN,
            TODO_UPDATE_OWN,
            TODO_DELETE_OWN,
        ],
    },
    VIEWER_ROLE: {
        "description": "Read-only access to own todos",
        "permissions": [TODO_READ_OWN],
    },
}


# ==================== Decision Functions ====================

def HasCapability(snapshot: Optional[AbstractSet[str]], name: str) -> bool:
    """
    Check whether a permission snapshot contains a capability

    Exact membership only, no wildcard or prefix matching.

    Args:
        snapshot: Set of permission names held by the user
        name: Permission name to look for

    Returns:
        bool: True if the name is in the snapshot
    """
    if not snapshot:
        return False
    return name in snapshot


def HasAllCapabilities(snapshot: Optional[AbstractSet[str]], names: Iterable[str]) -> bool:
    """
    Check whether a snapshot contains every required capability

    An empty requirement list always passes.

    Args:
        snapshot: Set of permission names held by the user
        names: Required permission names

    Returns:
        bool: True if all names are held
    """
    return all(HasCapability(snapshot, name) for name in names)


def CanAccessOwned(
    snapshot: Optional[AbstractSet[str]],
    resource_owner_id,
    current_user_id,
    own_capability: str,
    any_capability: str
) -> bool:
    """
    Decide access to an owned resource using an own/any permission pair

    Access is granted when the user holds any_capability, or holds
    own_capability and owns the resource.

    Args:
        snapshot: Set of permission names held by the user
        resource_owner_id: ID of the user who owns the resource
        current_user_id: ID of the requesting user
        own_capability: Permission for acting on own resources (e.g. 'todo:read:own')
        any_capability: Permission for acting on any resource (e.g. 'todo:read:any')

    Returns:
        bool: True if access is allowed
    """
    if HasCapability(snapshot, any_capability):
        return True

    return HasCapability(snapshot, own_capability) and resource_owner_id == current_user_id
