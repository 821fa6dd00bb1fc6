"""
Tests for the HTTP API of Todo RBAC Server

Drives the FastAPI app through TestClient against an in-memory database.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.database import Todo, User
from permissions import (
    ADMIN_ROLE,
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLES,
    STANDARD_USER_ROLE,
    TODO_CREATE,
    TODO_READ_OWN,
    VIEWER_ROLE,
)

# Password set by the create_user fixture
DEFAULT_PASSWORD = "password123"


def RoleIdFor(client, headers, role_name):
    roles = client.get("/api/roles", headers=headers).json()["roles"]
    return next(role["role_id"] for role in roles if role["role_name"] == role_name)


# ==================== Status ====================

def test_health_check(client):
    """Test the unauthenticated health endpoint"""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ==================== Registration and Login ====================

def test_register_assigns_default_role(client):
    """Test that registration creates a standard user and returns a usable token"""
    response = client.post("/api/auth/register", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123"
    })

    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["expires_in"] == 24 * 3600
    assert data["user"]["username"] == "alice"
    assert data["user"]["role"] == STANDARD_USER_ROLE
    assert data["user"]["permissions"] == sorted(DEFAULT_ROLES[STANDARD_USER_ROLE]["permissions"])

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "alice@example.com"


def test_register_duplicate_email(client, db_manager, create_user):
    """Test that a duplicate email is refused without creating a row or a token"""
    create_user("bob", email="bob@example.com")

    response = client.post("/api/auth/register", json={
        "username": "bobby",
        "email": "bob@example.com",
        "password": "secret123"
    })

    assert response.status_code == 400
    data = response.json()
    assert data["kind"] == "ValidationError"
    assert "token" not in data

    with db_manager.GetSession() as session:
        assert session.query(User).filter(User.username == "bobby").first() is None


def test_register_duplicate_username(client, create_user):
    """Test that a duplicate username is refused"""
    create_user("carol")

    response = client.post("/api/auth/register", json={
        "username": "carol",
        "email": "carol2@example.com",
        "password": "secret123"
    })

    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_register_invalid_payload(client):
    """Test that schema violations are reported as ValidationError"""
    response = client.post("/api/auth/register", json={
        "username": "x",
        "email": "not-an-email",
        "password": "1"
    })

    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_login(client, create_user):
    """Test login with correct and incorrect passwords"""
    create_user("dave")

    response = client.post("/api/auth/login", json={"email": "dave@example.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "dave"

    response = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"

    response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "wrong"})
    assert response.status_code == 401


def test_change_password(client, create_user, auth_headers):
    """Test changing the password and logging in with the new one"""
    user_id = create_user("erin")
    headers = auth_headers(user_id)

    response = client.post("/api/auth/change_password", headers=headers, json={
        "current_password": "wrong-password",
        "new_password": "newsecret"
    })
    assert response.status_code == 400

    response = client.post("/api/auth/change_password", headers=headers, json={
        "current_password": DEFAULT_PASSWORD,
        "new_password": "newsecret"
    })
    assert response.status_code == 200
    assert response.json()["success"] is True

    login = client.post("/api/auth/login", json={"email": "erin@example.com", "password": "newsecret"})
    assert login.status_code == 200


# ==================== Authentication Failures ====================

def test_missing_token(client):
    """Test that protected endpoints require a credential"""
    response = client.get("/api/todos")

    assert response.status_code == 401
    assert response.json()["kind"] == "NoCredential"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_bearer_scheme_parsing(client, create_user, issue_token):
    """Test that the scheme is case-insensitive and other schemes count as no credential"""
    token = issue_token(create_user("abby"))

    response = client.get("/api/auth/me", headers={"Authorization": f"bearer {token}"})
    assert response.status_code == 200

    response = client.get("/api/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert response.status_code == 401
    assert response.json()["kind"] == "NoCredential"


def test_invalid_token(client):
    """Test that a garbage token is InvalidToken"""
    response = client.get("/api/todos", headers={"Authorization": "Bearer not-a-token"})

    assert response.status_code == 401
    assert response.json()["kind"] == "InvalidToken"


# ==================== Todos ====================

def test_create_and_list_own_todos(client, create_user, auth_headers):
    """Test that a standard user creates todos and lists only their own"""
    alice = create_user("alice")
    bob = create_user("bob")
    alice_headers = auth_headers(alice)

    response = client.post("/api/todos", headers=alice_headers, json={"title": "Write report"})
    assert response.status_code == 201
    todo = response.json()
    assert todo["title"] == "Write report"
    assert todo["status"] == "open"
    assert todo["user_id"] == alice

    client.post("/api/todos", headers=auth_headers(bob), json={"title": "Bob's task"})

    listing = client.get("/api/todos", headers=alice_headers).json()
    assert listing["total"] == 1
    assert [t["title"] for t in listing["todos"]] == ["Write report"]


def test_list_todos_filters_and_pages(client, create_user, create_todo, auth_headers):
    """Test status filtering and pagination"""
    user_id = create_user("frank")
    for i in range(3):
        create_todo(user_id, title=f"open {i}")
    create_todo(user_id, title="finished", status="done")
    headers = auth_headers(user_id)

    done = client.get("/api/todos", headers=headers, params={"status": "done"}).json()
    assert done["total"] == 1
    assert done["todos"][0]["title"] == "finished"

    page = client.get("/api/todos", headers=headers, params={"limit": 2, "offset": 0}).json()
    assert page["total"] == 4
    assert len(page["todos"]) == 2
    assert page["limit"] == 2

    response = client.get("/api/todos", headers=headers, params={"limit": 500})
    assert response.status_code == 400


def test_admin_lists_all_todos(client, create_user, create_todo, auth_headers):
    """Test that todo:read:any sees every user's todos"""
    admin = create_user("root", ADMIN_ROLE)
    create_todo(create_user("gina"))
    create_todo(create_user("hank"))

    listing = client.get("/api/todos", headers=auth_headers(admin)).json()

    assert listing["total"] == 2


def test_viewer_reads_other_users_todo_forbidden(client, create_user, create_todo, auth_headers):
    """Test that a viewer cannot read a todo owned by someone else"""
    owner = create_user("ivan")
    viewer = create_user("judy", VIEWER_ROLE)
    todo_id = create_todo(owner)

    response = client.get(f"/api/todos/{todo_id}", headers=auth_headers(viewer))

    assert response.status_code == 403
    assert response.json()["kind"] == "InsufficientCapability"


def test_viewer_reads_own_todo(client, create_user, create_todo, auth_headers):
    """Test that a viewer can read but not create or change their own todos"""
    viewer = create_user("kate", VIEWER_ROLE)
    todo_id = create_todo(viewer)
    headers = auth_headers(viewer)

    assert client.get(f"/api/todos/{todo_id}", headers=headers).status_code == 200
    assert client.post("/api/todos", headers=headers, json={"title": "x"}).status_code == 403
    assert client.patch(f"/api/todos/{todo_id}", headers=headers, json={"title": "y"}).status_code == 403
    assert client.delete(f"/api/todos/{todo_id}", headers=headers).status_code == 403


def test_admin_reads_any_todo(client, create_user, create_todo, auth_headers):
    """Test that an admin can read a standard user's todo"""
    admin = create_user("root", ADMIN_ROLE)
    owner = create_user("leo")
    todo_id = create_todo(owner, title="Leo's todo")

    response = client.get(f"/api/todos/{todo_id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["title"] == "Leo's todo"
    assert response.json()["user"]["username"] == "leo"


def test_missing_todo_is_not_found_before_forbidden(client, create_user, auth_headers):
    """Test that a missing todo is 404 even for a caller with no todo permissions"""
    user_id = create_user("mia", VIEWER_ROLE)
    admin_headers = auth_headers(create_user("root", ADMIN_ROLE))

    # Strip every permission from the viewer role first
    role_id = RoleIdFor(client, admin_headers, VIEWER_ROLE)
    response = client.put(f"/api/roles/{role_id}/permissions", headers=admin_headers, json={"permissions": []})
    assert response.status_code == 200

    response = client.get("/api/todos/9999", headers=auth_headers(user_id))

    assert response.status_code == 404
    assert response.json()["kind"] == "ResourceNotFound"


def test_update_own_todo(client, create_user, create_todo, auth_headers):
    """Test partial update keeps unspecified fields and the owner"""
    owner = create_user("nora")
    todo_id = create_todo(owner, title="Draft")
    headers = auth_headers(owner)

    response = client.patch(f"/api/todos/{todo_id}", headers=headers, json={"status": "done", "user_id": 999})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "done"
    assert data["title"] == "Draft"
    assert data["user_id"] == owner


def test_update_other_users_todo_forbidden(client, create_user, create_todo, auth_headers):
    """Test that todo:update:own does not reach someone else's todo"""
    owner = create_user("oscar")
    other = create_user("paul")
    todo_id = create_todo(owner)

    response = client.patch(f"/api/todos/{todo_id}", headers=auth_headers(other), json={"title": "mine now"})

    assert response.status_code == 403


def test_delete_todo(client, create_user, create_todo, auth_headers, db_manager):
    """Test deleting an own todo, and an admin deleting anyone's"""
    owner = create_user("quinn")
    admin = create_user("root", ADMIN_ROLE)
    own_id = create_todo(owner)
    other_id = create_todo(owner)

    response = client.delete(f"/api/todos/{own_id}", headers=auth_headers(owner))
    assert response.status_code == 200

    response = client.delete(f"/api/todos/{other_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    with db_manager.GetSession() as session:
        assert session.query(Todo).count() == 0

    response = client.delete(f"/api/todos/{own_id}", headers=auth_headers(owner))
    assert response.status_code == 404


# ==================== Live Permission Changes ====================

def test_role_downgrade_applies_to_existing_token(client, create_user, auth_headers):
    """Test that a role change affects the next request made with an old token"""
    admin = create_user("root", ADMIN_ROLE)
    user_id = create_user("rita", STANDARD_USER_ROLE)
    user_headers = auth_headers(user_id)
    admin_headers = auth_headers(admin)

    assert client.post("/api/todos", headers=user_headers, json={"title": "before"}).status_code == 201

    viewer_role_id = RoleIdFor(client, admin_headers, VIEWER_ROLE)
    response = client.patch(f"/api/users/{user_id}/role", headers=admin_headers, json={"role_id": viewer_role_id})
    assert response.status_code == 200
    assert response.json()["user"]["role"]["role_name"] == VIEWER_ROLE

    response = client.post("/api/todos", headers=user_headers, json={"title": "after"})
    assert response.status_code == 403

    me = client.get("/api/auth/me", headers=user_headers).json()["user"]
    assert me["role"] == VIEWER_ROLE
    assert me["permissions"] == [TODO_READ_OWN]


def test_role_permission_change_applies_to_holders(client, create_user, auth_headers):
    """Test that editing a role's permissions reaches every holder on the next request"""
    admin = create_user("root", ADMIN_ROLE)
    viewer = create_user("sam", VIEWER_ROLE)
    admin_headers = auth_headers(admin)
    viewer_headers = auth_headers(viewer)

    assert client.post("/api/todos", headers=viewer_headers, json={"title": "x"}).status_code == 403

    role_id = RoleIdFor(client, admin_headers, VIEWER_ROLE)
    response = client.put(
        f"/api/roles/{role_id}/permissions",
        headers=admin_headers,
        json={"permissions": [TODO_READ_OWN, TODO_CREATE]}
    )
    assert response.status_code == 200
    assert response.json()["permissions"] == [TODO_READ_OWN, TODO_CREATE]

    assert client.post("/api/todos", headers=viewer_headers, json={"title": "x"}).status_code == 201


def test_deleted_user_token_rejected(client, create_user, auth_headers):
    """Test that a deleted user's token stops working"""
    admin = create_user("root", ADMIN_ROLE)
    user_id = create_user("tina")
    user_headers = auth_headers(user_id)

    assert client.get("/api/auth/me", headers=user_headers).status_code == 200

    response = client.delete(f"/api/users/{user_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    response = client.get("/api/auth/me", headers=user_headers)
    assert response.status_code == 401
    assert response.json()["kind"] == "IdentityGone"


# ==================== User Management ====================

def test_user_management_requires_permission(client, create_user, auth_headers):
    """Test that user management is closed to standard users"""
    headers = auth_headers(create_user("uma"))

    assert client.get("/api/users", headers=headers).status_code == 403
    assert client.patch("/api/users/1/role", headers=headers, json={"role_id": 1}).status_code == 403
    assert client.delete("/api/users/1", headers=headers).status_code == 403


def test_list_users(client, create_user, auth_headers):
    """Test the admin user listing"""
    admin = create_user("root", ADMIN_ROLE)
    create_user("vera", VIEWER_ROLE)

    users = client.get("/api/users", headers=auth_headers(admin)).json()["users"]
    by_name = {u["username"]: u for u in users}

    assert "vera" in by_name
    assert by_name["vera"]["role"]["role_name"] == VIEWER_ROLE
    assert "password_hash" not in by_name["vera"]


def test_update_user_role_not_found(client, create_user, auth_headers):
    """Test reassignment with an unknown user or role"""
    admin = create_user("root", ADMIN_ROLE)
    user_id = create_user("walt")
    headers = auth_headers(admin)

    response = client.patch("/api/users/9999/role", headers=headers, json={"role_id": 1})
    assert response.status_code == 404
    assert response.json()["error"] == "User not found"

    response = client.patch(f"/api/users/{user_id}/role", headers=headers, json={"role_id": 9999})
    assert response.status_code == 404
    assert response.json()["error"] == "Role not found"


def test_delete_user_cascades_todos(client, create_user, create_todo, auth_headers, db_manager):
    """Test that deleting a user deletes their todos"""
    admin = create_user("root", ADMIN_ROLE)
    user_id = create_user("xena")
    create_todo(user_id)
    create_todo(user_id)

    response = client.delete(f"/api/users/{user_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    with db_manager.GetSession() as session:
        assert session.query(Todo).filter(Todo.user_id == user_id).count() == 0


def test_cannot_delete_self(client, create_user, auth_headers):
    """Test that an admin cannot delete their own account"""
    admin = create_user("root", ADMIN_ROLE)

    response = client.delete(f"/api/users/{admin}", headers=auth_headers(admin))

    assert response.status_code == 400


# ==================== Roles ====================

def test_list_roles(client, create_user, auth_headers):
    """Test that any authenticated user can list roles"""
    headers = auth_headers(create_user("yara", VIEWER_ROLE))

    roles = client.get("/api/roles", headers=headers).json()["roles"]
    by_name = {r["role_name"]: r for r in roles}

    assert set(by_name) == set(DEFAULT_ROLES)
    assert by_name[VIEWER_ROLE]["permissions"] == [TODO_READ_OWN]
    assert by_name[VIEWER_ROLE]["user_count"] == 1


def test_list_permissions(client, create_user, auth_headers):
    """Test that the vocabulary is listed for role managers only"""
    admin = create_user("root", ADMIN_ROLE)

    response = client.get("/api/permissions", headers=auth_headers(admin))
    assert response.status_code == 200
    names = [p["permission_name"] for p in response.json()["permissions"]]
    assert sorted(names) == sorted(DEFAULT_PERMISSIONS)

    response = client.get("/api/permissions", headers=auth_headers(create_user("zed")))
    assert response.status_code == 403


def test_set_role_permissions_rejects_unknown(client, create_user, auth_headers):
    """Test that the API refuses unknown permission names and leaves the role unchanged"""
    admin = create_user("root", ADMIN_ROLE)
    headers = auth_headers(admin)
    role_id = RoleIdFor(client, headers, VIEWER_ROLE)

    response = client.put(
        f"/api/roles/{role_id}/permissions",
        headers=headers,
        json={"permissions": [TODO_CREATE, "todo:archive"]}
    )

    assert response.status_code == 400
    assert "todo:archive" in response.json()["error"]

    roles = client.get("/api/roles", headers=headers).json()["roles"]
    viewer = next(r for r in roles if r["role_name"] == VIEWER_ROLE)
    assert viewer["permissions"] == [TODO_READ_OWN]


def test_set_role_permissions_unknown_role(client, create_user, auth_headers):
    """Test that a missing role is 404"""
    headers = auth_headers(create_user("root", ADMIN_ROLE))

    response = client.put("/api/roles/9999/permissions", headers=headers, json={"permissions": []})

    assert response.status_code == 404


# ==================== Identifiers and Timestamps ====================

def test_deleted_user_id_not_reused(client, create_user, auth_headers):
    """Test that a new account never inherits the id, and so the tokens, of a deleted one"""
    admin = create_user("root", ADMIN_ROLE)
    user_id = create_user("tina")
    old_headers = auth_headers(user_id)

    response = client.delete(f"/api/users/{user_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    response = client.post("/api/auth/register", json={
        "username": "mallory",
        "email": "mallory@example.com",
        "password": "secret123"
    })
    assert response.status_code == 200
    assert response.json()["user"]["id"] != user_id

    response = client.get("/api/auth/me", headers=old_headers)
    assert response.status_code == 401
    assert response.json()["kind"] == "IdentityGone"


def test_deleted_todo_id_not_reused(client, create_user, create_todo, auth_headers):
    """Test that todo ids keep increasing after the newest todo is deleted"""
    owner = create_user("uri")
    headers = auth_headers(owner)
    todo_id = create_todo(owner)

    assert client.delete(f"/api/todos/{todo_id}", headers=headers).status_code == 200

    response = client.post("/api/todos", headers=headers, json={"title": "again"})
    assert response.json()["todo_id"] > todo_id


def test_due_date_offset_converted_to_utc(client, create_user, auth_headers):
    """Test that due dates with an offset are stored and returned as the same instant in UTC"""
    headers = auth_headers(create_user("vic"))

    response = client.post("/api/todos", headers=headers, json={
        "title": "Call Delhi",
        "due_date": "2026-01-01T10:00:00+05:00"
    })
    assert response.status_code == 201
    todo = response.json()
    assert todo["due_date"] == "2026-01-01T05:00:00Z"

    fetched = client.get(f"/api/todos/{todo['todo_id']}", headers=headers).json()
    assert fetched["due_date"] == "2026-01-01T05:00:00Z"

    response = client.patch(f"/api/todos/{todo['todo_id']}", headers=headers, json={
        "due_date": "2026-03-01T20:30:00-04:00"
    })
    assert response.json()["due_date"] == "2026-03-02T00:30:00Z"


def test_due_date_without_offset_taken_as_utc(client, create_user, auth_headers):
    """Test that a naive due date is kept as given and marked UTC"""
    headers = auth_headers(create_user("wes"))

    response = client.post("/api/todos", headers=headers, json={
        "title": "Local",
        "due_date": "2026-01-01T10:00:00"
    })

    assert response.json()["due_date"] == "2026-01-01T10:00:00Z"
