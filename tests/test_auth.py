import hashlib

from fastapi.testclient import TestClient

from conftest import PASSWORD, login, rows
from sitecms.main import app
from sitecms.models import ActivityLogEntry, User


def test_login_check_logout(client, make_user):
    make_user("alice", role="admin")

    resp = login(client, "alice")
    body = resp.json()
    assert body["success"] == "Login successful"
    assert body["data"]["user"]["username"] == "alice"
    assert "password_hash" not in body["data"]["user"]

    check = client.get("/auth?action=check").json()
    assert check["data"]["is_admin"] is True
    assert check["data"]["user"]["email"] == "alice@blessed.ac.ug"

    assert client.post("/auth?action=logout").json() == {"success": "Logout successful"}
    resp = client.get("/auth?action=check")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Not authenticated"}


def test_login_failures(client, make_user):
    make_user("bob")
    make_user("carol", is_active=False)

    resp = client.post("/auth?action=login", json={"username": "bob"})
    assert resp.json() == {"error": "Username and password are required"}

    for username, password in (("bob", "wrong"), ("nobody", PASSWORD), ("carol", PASSWORD)):
        resp = client.post("/auth?action=login", json={"username": username, "password": password})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid credentials"}


def test_legacy_md5_hash_is_upgraded_on_login(client, make_user, test_engine):
    legacy = hashlib.md5(b"oldpass").hexdigest()
    make_user("legacy", password_hash=legacy)

    login(client, "legacy", "oldpass")
    user = rows(test_engine, User, User.username == "legacy")[0]
    assert user.password_hash.startswith("$argon2")
    assert user.last_login_at is not None

    client.post("/auth?action=logout")
    login(client, "legacy", "oldpass")


def test_login_and_logout_are_logged(client, make_user, test_engine):
    make_user("dave")
    login(client, "dave")
    client.post("/auth?action=logout")
    actions = [r.action for r in rows(test_engine, ActivityLogEntry)]
    assert actions == ["login", "logout"]


def test_register_is_admin_only(editor_client, admin_client):
    payload = {"username": "erin", "password": "pw12345", "email": "erin@blessed.ac.ug", "full_name": "Erin"}

    assert editor_client.post("/auth?action=register", json=payload).status_code == 403

    resp = admin_client.post("/auth?action=register", json=payload)
    assert resp.json()["success"] == "User registered successfully"
    assert isinstance(resp.json()["data"]["user_id"], int)

    dup = admin_client.post("/auth?action=register", json={**payload, "email": "other@blessed.ac.ug"})
    assert dup.json() == {"error": "Username or email already exists"}

    with TestClient(app) as c:
        login(c, "erin", "pw12345")
        assert c.get("/auth?action=check").json()["data"]["is_admin"] is False


def test_register_validation(admin_client):
    resp = admin_client.post("/auth?action=register", json={"username": "x"})
    assert resp.json() == {"error": "All fields are required"}

    payload = {"username": "y", "password": "p", "email": "bad", "full_name": "Y"}
    assert admin_client.post("/auth?action=register", json=payload).json() == {"error": "Invalid email address"}

    payload["email"] = "y@blessed.ac.ug"
    payload["role"] = "superuser"
    assert admin_client.post("/auth?action=register", json=payload).json() == {"error": "Invalid role"}


def test_profile_get_and_update(editor_client, admin_client):
    profile = editor_client.get("/auth?action=profile").json()["data"]["user"]
    assert profile["username"] == "editor"
    assert "created_at" in profile

    resp = editor_client.put("/auth?action=profile", json={"email": "admin@blessed.ac.ug"})
    assert resp.json() == {"error": "Email already exists"}

    resp = editor_client.put("/auth?action=profile", json={"full_name": "Ed Itor", "password": "newpass1"})
    assert resp.json() == {"success": "Profile updated successfully"}

    with TestClient(app) as c:
        login(c, "editor", "newpass1")


def test_profile_requires_login(client):
    assert client.get("/auth?action=profile").status_code == 401
    assert client.put("/auth?action=profile", json={"full_name": "x"}).status_code == 401


def test_profile_update_without_fields(editor_client):
    resp = editor_client.put("/auth?action=profile", json={"full_name": ""})
    assert resp.json() == {"error": "No fields to update"}
