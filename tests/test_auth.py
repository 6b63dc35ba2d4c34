"""Registration, login and token handling."""
import pytest

from student_portal.api.routes import auth_routes
from student_portal.core.auth import create_access_token
from student_portal.db.mongodb import COLLECTIONS


def register(client, **body):
    payload = {"name": "Ravi Kumar", "phone": "9876543210", "state": "TS"}
    payload.update(body)
    return client.post("/api/auth/register", json=payload)


def test_register_student_creates_student_and_profile(client, mongo_db):
    resp = register(client, email="Ravi@Example.com", password="secret123", qualification="B.Tech")

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "ravi@example.com"
    assert body["user"]["role"] == "USER"
    assert body["user"]["tier"] == "FREE"

    user = mongo_db[COLLECTIONS["users"]].find_one({"email": "ravi@example.com"})
    assert user["password"] != "secret123"

    student = mongo_db[COLLECTIONS["students"]].find_one({"email": "ravi@example.com"})
    assert student["qualification"] == "B.Tech"
    assert student["status"] == "Active"
    assert student["job_alerts"] == {"enabled": True}
    assert student["student_id"].startswith("STU-")

    profile = mongo_db[COLLECTIONS["user_profiles"]].find_one({"email": "ravi@example.com"})
    assert profile["full_name"] == "Ravi Kumar"
    assert profile["mobile_number"] == "9876543210"

    activity = mongo_db[COLLECTIONS["activities"]].find_one({"action": "REGISTER"})
    assert activity["user_id"] == user["_id"]


def test_register_without_qualification_skips_student(client, mongo_db):
    resp = register(client, email="x@example.com")
    assert resp.status_code == 201
    assert mongo_db[COLLECTIONS["students"]].count_documents({}) == 0


def test_register_company_creates_pending_company(client, mongo_db):
    resp = register(client, role="COMPANY", email="hr@acme.com", password="secret123", company_name="Acme")

    assert resp.status_code == 201
    company = mongo_db[COLLECTIONS["companies"]].find_one()
    assert company["company_name"] == "Acme"
    assert company["verification_status"] == "pending"


def test_register_company_requires_credentials(client):
    resp = register(client, role="COMPANY", company_name="Acme")
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_staff_roles_cannot_self_register(client):
    resp = register(client, role="SUPER_ADMIN")
    assert resp.status_code == 400
    assert "USER and COMPANY" in resp.json()["error"]


def test_duplicate_email_and_phone_rejected(client):
    assert register(client, email="dup@example.com").status_code == 201

    resp = register(client, email="dup@example.com", phone="9000000000")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Email already registered"}

    resp = register(client, email="other@example.com")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Phone already registered"


def test_login_with_email_and_password(client, make_user, mongo_db):
    user = make_user(email="login@example.com", password="secret123")

    resp = client.post("/api/auth/login", json={"email": "login@example.com", "password": "secret123"})

    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == str(user["_id"])
    assert mongo_db[COLLECTIONS["activities"]].find_one({"action": "LOGIN"})["metadata"]["login_method"] == "email"


def test_login_wrong_password(client, make_user):
    make_user(email="login@example.com", password="secret123")
    resp = client.post("/api/auth/login", json={"email": "login@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid email or password"


@pytest.fixture
def phone_login(monkeypatch):
    monkeypatch.setattr(auth_routes.settings, "allow_phone_login", True)


def test_phone_login_disabled_by_default(client, make_user):
    user = make_user()
    resp = client.post("/api/auth/login", json={"phone": user["phone"]})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Phone login is disabled"


def test_login_with_phone(client, make_user, phone_login):
    user = make_user()
    resp = client.post("/api/auth/login", json={"phone": user["phone"]})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "USER"


@pytest.mark.parametrize("role", ["SUPER_ADMIN", "ADMIN", "SUPPORT", "COMPANY", "USER"])
def test_phone_login_refused_for_password_accounts(client, make_user, phone_login, role):
    user = make_user(role=role, phone="9000000003", password="secret123")
    resp = client.post("/api/auth/login", json={"phone": "9000000003"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Use email and password to log in"
    assert "token" not in resp.json()


def test_phone_login_refused_for_staff_without_password(client, make_user, phone_login):
    make_user(role="SUPPORT", phone="9000000001")
    resp = client.post("/api/auth/login", json={"phone": "9000000001"})
    assert resp.status_code == 401


def test_login_unknown_phone(client, phone_login):
    resp = client.post("/api/auth/login", json={"phone": "1111111111"})
    assert resp.status_code == 401


def test_login_requires_credentials(client):
    resp = client.post("/api/auth/login", json={})
    assert resp.status_code == 400


def test_me_returns_user_without_password(client, make_user, auth):
    user = make_user(password="secret123")
    resp = client.get("/api/auth/me", headers=auth(user))
    assert resp.status_code == 200
    data = resp.json()["user"]
    assert data["_id"] == str(user["_id"])
    assert "password" not in data


def test_missing_token_is_401(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Not authorized to access this route"}


def test_garbage_token_is_401(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_token_for_deleted_user_is_401(client):
    token = create_access_token({"sub": "64b7f0c2a1b2c3d4e5f60718"})
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
