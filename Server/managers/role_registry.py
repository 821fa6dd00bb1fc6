"""
Todo RBAC Server - Role Registry

This module manages the role/permission assignment model:
- Which permissions belong to which role
- Which role a user currently holds
- The live permission snapshot used by every authorization decision

Registry methods take an SQLAlchemy session and flush, but never commit.
The caller commits, so each operation is a single transaction.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy import func

from models.database import Permission, Role, RolePermission, User
from models.infrastructure import IdentityContext
from errors import RoleNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)


class RoleRegistry:
    """
    Reads and writes role assignments and role permissions
    """

    # ==================== Assignment Operations ====================

    def AssignPermissionsToRole(self, session, role_name: str, permission_names: Iterable[str]) -> List[str]:
        """
        Replace every permission of a role

        Deletes all existing associations for the role, then creates one per
        name that resolves to an existing permission. Unknown names are
        skipped. Applying the same names twice gives the same result.

        Args:
            session: SQLAlchemy session
            role_name: Name of the role to update
            permission_names: Permission names the role should hold

        Returns:
            list: Permission names actually assigned, in request order

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = self.GetRoleByName(session, role_name)
        if role is None:
            raise RoleNotFoundError(role_name)

        # Drop duplicates, keep first-seen order
        requested = list(dict.fromkeys(permission_names))

        session.query(RolePermission).filter(RolePermission.role_id == role.role_id).delete(synchronize_session=False)

        permissions_by_name = {}
        if requested:
            found = session.query(Permission).filter(Permission.permission_name.in_(requested)).all()
            permissions_by_name = {p.permission_name: p for p in found}

        assigned = []
        for perm_name in requested:
            permission = permissions_by_name.get(perm_name)
            if permission is None:
                logger.warning(f"Skipping unknown permission '{perm_name}' for role '{role_name}'")
                continue

            session.add(RolePermission(role_id=role.role_id, permission_id=permission.permission_id))
            assigned.append(perm_name)

        session.flush()
        # Reload the read-only relationship on next access
        session.expire(role, ["permissions"])

        return assigned

    def ReassignUserRole(self, session, user_id: int, new_role_id: int) -> User:
        """
        Move a user to a different role

        Only the user's role link changes; permissions follow from the role.

        Args:
            session: SQLAlchemy session
            user_id: User to update
            new_role_id: Role to assign

        Returns:
            User: The updated user

        Raises:
            UserNotFoundError: If the user does not exist
            RoleNotFoundError: If the role does not exist
        """
        user = session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        role = session.get(Role, new_role_id)
        if role is None:
            raise RoleNotFoundError(new_role_id)

        user.role_id = role.role_id
        session.flush()
        session.expire(user, ["role"])

        return user

    # ==================== Snapshot Operations ====================

    def SnapshotFor(self, session, user_id: int) -> Optional[FrozenSet[str]]:
        """
        Compute the permission names implied by a user's current role

        Always queried, never cached.

        Args:
            session: SQLAlchemy session
            user_id: User ID

        Returns:
            frozenset: Permission names, or None if the user does not exist
        """
        role_id = session.query(User.role_id).filter(User.user_id == user_id).scalar()
        if role_id is None:
            return None

        rows = (
            session.query(Permission.permission_name)
            .join(RolePermission, RolePermission.permission_id == Permission.permission_id)
            .filter(RolePermission.role_id == role_id)
            .all()
        )
        return frozenset(row[0] for row in rows)

    def ResolveIdentity(self, session, user_id: int) -> Optional[IdentityContext]:
        """
        Build the identity context for a user from live data

        Args:
            session: SQLAlchemy session
            user_id: User ID

        Returns:
            IdentityContext: Resolved identity, or None if the user does not exist
        """
        user = session.get(User, user_id)
        if user is None:
            return None

        snapshot = self.SnapshotFor(session, user_id)
        if snapshot is None:
            return None

        return IdentityContext(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role_id=user.role_id,
            role_name=user.role.role_name if user.role else "",
            permissions=snapshot
        )

    # ==================== Read Helpers ====================

    def GetRoleByName(self, session, role_name: str) -> Optional[Role]:
        return session.query(Role).filter(Role.role_name == role_name).first()

    def GetRolePermissions(self, session, role_id: int = None, role_name: str = None) -> List[str]:
        """
        Get all permission names for a role

        Args:
            session: SQLAlchemy session
            role_id: Role ID (optional)
            role_name: Role name (optional)

        Returns:
            list: Sorted permission names, empty if the role is unknown
        """
        query = (
            session.query(Permission.permission_name)
            .join(RolePermission, RolePermission.permission_id == Permission.permission_id)
            .join(Role, Role.role_id == RolePermission.role_id)
        )
        if role_id is not None:
            query = query.filter(Role.role_id == role_id)
        elif role_name is not None:
            query = query.filter(Role.role_name == role_name)
        else:
            return []

        return sorted(row[0] for row in query.all())

    def GetAllRoles(self, session) -> List[Role]:
        return session.query(Role).order_by(Role.role_name).all()

    def GetAllPermissions(self, session) -> List[Permission]:
        return session.query(Permission).order_by(Permission.permission_name).all()

    def GetUsersWithRole(self, session, role_id: int) -> List[User]:
        """
        Get all users holding a role

        Args:
            session: SQLAlchemy session
            role_id: Role ID

        Returns:
            list: List of User objects
        """
        return session.query(User).filter(User.role_id == role_id).all()

    def GetUserCountsByRole(self, session) -> Dict[int, int]:
        """
        Count the holders of every role in one query

        Args:
            session: SQLAlchemy session

        Returns:
            dict: role_id -> number of users; roles without users are absent
        """
        rows = session.query(User.role_id, func.count(User.user_id)).group_by(User.role_id).all()
        return {role_id: count for role_id, count in rows}
