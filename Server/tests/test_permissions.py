"""
Tests for permission evaluation in Todo RBAC Server

Tests the pure decision functions and the default role definitions.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from permissions import (
    ADMIN_ROLE,
    CanAccessOwned,
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    HasAllCapabilities,
    HasCapability,
    STANDARD_USER_ROLE,
    TODO_CREATE,
    TODO_READ_ANY,
    TODO_READ_OWN,
    TODO_UPDATE_ANY,
    TODO_UPDATE_OWN,
    USER_MANAGE,
    VIEWER_ROLE,
)


def test_has_capability_exact_membership():
    """Test that only exact names match"""
    snapshot = frozenset({TODO_READ_OWN, TODO_CREATE})

    assert HasCapability(snapshot, TODO_READ_OWN)
    assert HasCapability(snapshot, TODO_CREATE)

    # No prefix or wildcard matching
    assert not HasCapability(snapshot, "todo:read")
    assert not HasCapability(snapshot, "todo:*")
    assert not HasCapability(snapshot, TODO_READ_ANY)


def test_has_capability_empty_snapshot():
    """Test that an empty or missing snapshot holds nothing"""
    assert not HasCapability(frozenset(), TODO_READ_OWN)
    assert not HasCapability(None, TODO_READ_OWN)


def test_any_does_not_imply_own():
    """Test that holding the 'any' variant says nothing about the 'own' variant"""
    snapshot = frozenset({TODO_UPDATE_ANY})

    assert HasCapability(snapshot, TODO_UPDATE_ANY)
    assert not HasCapability(snapshot, TODO_UPDATE_OWN)


def test_has_all_capabilities():
    """Test requiring several capabilities at once"""
    snapshot = frozenset({USER_MANAGE, TODO_CREATE})

    assert HasAllCapabilities(snapshot, [USER_MANAGE, TODO_CREATE])
    assert not HasAllCapabilities(snapshot, [USER_MANAGE, TODO_READ_ANY])

    # Empty requirement list always passes
    assert HasAllCapabilities(snapshot, [])
    assert HasAllCapabilities(frozenset(), [])


@pytest.mark.parametrize("permissions, owner_id, current_id, expected", [
    ({TODO_READ_ANY}, 1, 2, True),
    ({TODO_READ_ANY}, 2, 2, True),
    ({TODO_READ_OWN}, 2, 2, True),
    ({TODO_READ_OWN}, 1, 2, False),
    ({TODO_READ_OWN, TODO_READ_ANY}, 1, 2, True),
    (set(), 2, 2, False),
    (set(), 1, 2, False),
    ({TODO_CREATE}, 2, 2, False),
])
def test_can_access_owned(permissions, owner_id, current_id, expected):
    """Test the own/any decision for every combination of holdings and ownership"""
    result = CanAccessOwned(frozenset(permissions), owner_id, current_id, TODO_READ_OWN, TODO_READ_ANY)
    assert result is expected


def test_default_roles_use_known_permissions():
    """Test that every default role only references the permission vocabulary"""
    for role_name, role_config in DEFAULT_ROLES.items():
        for perm_name in role_config["permissions"]:
            assert perm_name in DEFAULT_PERMISSIONS, f"{role_name} references unknown '{perm_name}'"


def test_default_role_assignments():
    """Test the default capabilities of each built-in role"""
    admin = set(DEFAULT_ROLES[ADMIN_ROLE]["permissions"])
    standard = set(DEFAULT_ROLES[STANDARD_USER_ROLE]["permissions"])
    viewer = set(DEFAULT_ROLES[VIEWER_ROLE]["permissions"])

    assert USER_MANAGE in admin
    assert TODO_READ_ANY in admin

    assert TODO_CREATE in standard
    assert TODO_READ_ANY not in standard
    assert USER_MANAGE not in standard

    assert viewer == {TODO_READ_OWN}
