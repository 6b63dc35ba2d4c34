"""
Shared fixtures: an in-memory MongoDB (mongomock) and a TestClient.

The app is imported after the environment is prepared so settings pick it up.
"""
import os
import tempfile

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="student-portal-uploads-"))

from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from student_portal.core.auth import create_access_token, hash_password
from student_portal.db import mongodb
from student_portal.db.mongodb import COLLECTIONS
from student_portal.main import app
from student_portal.utils.common import generate_public_id, utcnow


@pytest.fixture(autouse=True)
def mongo_db():
    """Fresh in-memory database for every test."""
    mongodb._client = mongomock.MongoClient()
    mongodb._db = None
    yield mongodb.get_mongo_db()
    mongodb._client = None
    mongodb._db = None


@pytest.fixture
def client():
    # No context manager: startup (index creation) is skipped
    return TestClient(app)


@pytest.fixture
def make_user(mongo_db):
    counter = {"n": 0}

    def _make(role="USER", state="AP", email=None, password=None, name=None, **extra):
        counter["n"] += 1
        n = counter["n"]
        now = utcnow()
        user = {
            "name": name or f"{role.title()} {n}",
            "email": email if email is not None else f"{role.lower()}{n}@example.com",
            "phone": f"98{n:08d}",
            "role": role,
            "state": state,
            "tier": "FREE",
            "plan": {"name": "FREE", "is_paid": False},
            "has_paid_plan": False,
            "is_paid": False,
            "created_at": now,
            "updated_at": now,
        }
        if password:
            user["password"] = hash_password(password)
        user.update(extra)
        user["_id"] = mongo_db[COLLECTIONS["users"]].insert_one(user).inserted_id
        return user

    return _make


@pytest.fixture
def make_student(mongo_db):
    def _make(user=None, qualification="B.Tech", status="Active", alerts=True, email=None):
        student = {
            "student_id": generate_public_id("STU"),
            "name": user["name"] if user else "Student",
            "email": (user["email"] if user else email) or f"{generate_public_id('s').lower()}@example.com",
            "phone": user["phone"] if user else "9999999999",
            "qualification": qualification,
            "job_alerts": {"enabled": alerts},
            "status": status,
            "created_at": utcnow(),
        }
        student["_id"] = mongo_db[COLLECTIONS["students"]].insert_one(student).inserted_id
        return student

    return _make


def token_for(user: dict) -> str:
    return create_access_token({"sub": str(user["_id"]), "role": user["role"]}, timedelta(hours=1))


def auth_header(user: dict) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def auth():
    return auth_header


def future(days: int = 30):
    return utcnow() + timedelta(days=days)
