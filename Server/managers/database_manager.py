"""
Todo RBAC Server - Database Manager

This module manages the database connection, schema creation and the
bootstrap seed of permissions, roles and the default admin user.
"""

import logging
import secrets
import string
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models.database import Base, Permission, Role, User
from managers.role_registry import RoleRegistry
from permissions import ADMIN_ROLE, DEFAULT_PERMISSIONS, DEFAULT_ROLES

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages database connection, initialization, and sessions
    """

    def __init__(self, database_url: str = "sqlite:///database/todo_rbac.db", registry: RoleRegistry = None):
        """
        Initialize database manager

        Args:
            database_url: SQLAlchemy database URL
            registry: RoleRegistry used for seeding (a new one if omitted)
        """
        self.database_url = database_url
        self.registry = registry or RoleRegistry()

        url = make_url(database_url)
        engine_kwargs = {"echo": False}

        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}

            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
            else:
                db_dir = Path(url.database).parent
                if str(db_dir) != '.':
                    db_dir.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False)

    def InitializeDatabase(self, credential_manager, admin_email: str = "admin@example.com") -> Optional[str]:
        """
        Initialize the database with all tables and default data
        Creates tables if they don't exist, reseeds default roles and
        permissions, and creates a default admin user on first run.

        Args:
            credential_manager: CredentialManager used to hash the admin password
            admin_email: Email address for the default admin user

        Returns:
            str: Generated admin password if admin user was created, None otherwise
        """
        Base.metadata.create_all(bind=self.engine)

        session = self.SessionLocal()
        admin_password = None

        try:
            is_first_run = session.query(User).count() == 0

            self.PopulateDefaultRolesAndPermissions(session)

            if is_first_run:
                admin_role = self.registry.GetRoleByName(session, ADMIN_ROLE)

                admin_password = self.GenerateRandomPassword()
                admin_user = User(
                    username="admin",
                    email=admin_email,
                    password_hash=credential_manager.HashPassword(admin_password),
                    role_id=admin_role.role_id
                )
                session.add(admin_user)
                logger.info(f"Created default admin user '{admin_user.username}' <{admin_email}>")

            session.commit()

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        return admin_password

    def PopulateDefaultRolesAndPermissions(self, session):
        """
        Seed the permission vocabulary and default roles

        Missing permissions and roles are created; existing ones keep their
        description. Every default role's permissions are then replaced in
        full, so reseeding restores the default assignment.

        Args:
            session: SQLAlchemy session
        """
        for perm_name, description in DEFAULT_PERMISSIONS.items():
            existing = session.query(Permission).filter(Permission.permission_name == perm_name).first()
            if not existing:
                session.add(Permission(permission_name=perm_name, description=description))
                logger.info(f"Added default permission: {perm_name}")

        for role_name, role_config in DEFAULT_ROLES.items():
            existing_role = self.registry.GetRoleByName(session, role_name)
            if not existing_role:
                session.add(Role(role_name=role_name, description=role_config["description"]))
                logger.info(f"Added default role: {role_name}")

        session.flush()

        for role_name, role_config in DEFAULT_ROLES.items():
            self.registry.AssignPermissionsToRole(session, role_name, role_config["permissions"])

    @staticmethod
    def GenerateRandomPassword(length: int = 16) -> str:
        """
        Generate a secure random password

        Args:
            length: Password length (default 16)

        Returns:
            str: Generated password
        """
        alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
        return ''.join(secrets.choice(alphabet) for _ in range(length))

    def GetSession(self):
        """
        Get a new database session

        Returns:
            Session: SQLAlchemy session
        """
        return self.SessionLocal()

    def Dispose(self):
        """Release pooled connections"""
        self.engine.dispose()
