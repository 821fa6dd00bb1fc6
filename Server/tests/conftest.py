"""
Shared fixtures for Todo RBAC Server tests

Each test gets a seeded in-memory database and a credential manager with a
fixed key and the minimum bcrypt cost.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

import auth
import database
from auth import BuildTokenClaims
from managers import CredentialManager, DatabaseManager
from models.database import Role, Todo, User
from permissions import STANDARD_USER_ROLE

TEST_SECRET_KEY = "test-secret-key-not-for-production"
DEFAULT_PASSWORD = "password123"


@pytest.fixture
def credential_manager():
    return CredentialManager(secret_key=TEST_SECRET_KEY, bcrypt_rounds=4)


@pytest.fixture
def db_manager(credential_manager):
    manager = DatabaseManager("sqlite://", registry=auth.role_registry)
    manager.InitializeDatabase(credential_manager)
    yield manager
    manager.Dispose()


@pytest.fixture
def db_session(db_manager):
    session = db_manager.GetSession()
    yield session
    session.close()


@pytest.fixture
def client(db_manager, credential_manager, monkeypatch):
    """TestClient bound to the test database (lifespan is not run)"""
    monkeypatch.setattr(database, "db_manager", db_manager)
    monkeypatch.setattr(auth, "credential_manager", credential_manager)

    from server import app
    return TestClient(app)


@pytest.fixture
def create_user(db_manager, credential_manager):
    """Factory inserting a user with DEFAULT_PASSWORD; returns the user_id"""
    password_hash = credential_manager.HashPassword(DEFAULT_PASSWORD)

    def _create_user(username, role_name=STANDARD_USER_ROLE, email=None):
        with db_manager.GetSession() as session:
            role = session.query(Role).filter(Role.role_name == role_name).one()
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=password_hash,
                role_id=role.role_id
            )
            session.add(user)
            session.commit()
            return user.user_id

    return _create_user


@pytest.fixture
def create_todo(db_manager):
    """Factory inserting a todo owned by user_id; returns the todo_id"""
    def _create_todo(user_id, title="Buy milk", status="open"):
        with db_manager.GetSession() as session:
            todo = Todo(title=title, status=status, user_id=user_id)
            session.add(todo)
            session.commit()
            return todo.todo_id

    return _create_todo


@pytest.fixture
def issue_token(db_manager, credential_manager):
    """Issue a valid token for a user from their current identity"""
    def _issue_token(user_id):
        with db_manager.GetSession() as session:
            identity = auth.role_registry.ResolveIdentity(session, user_id)
        return credential_manager.IssueToken(BuildTokenClaims(identity))

    return _issue_token


@pytest.fixture
def auth_headers(issue_token):
    """Authorization headers carrying a fresh token for user_id"""
    def _auth_headers(user_id):
        return {"Authorization": f"Bearer {issue_token(user_id)}"}

    return _auth_headers
