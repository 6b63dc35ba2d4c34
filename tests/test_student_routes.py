"""Student dashboard: notifications and job listings."""
from datetime import datetime, timedelta

import pytest

from student_portal.db.mongodb import COLLECTIONS
from student_portal.services.notification_service import build_notification
from student_portal.utils.common import generate_public_id, utcnow


@pytest.fixture
def student_user(make_user, make_student):
    user = make_user(role="USER", email="stud@example.com")
    student = make_student(user=user, qualification="B.Tech")
    return user, student


def insert_job(db, **overrides):
    job = {
        "job_id": generate_public_id("JOB"),
        "job_title": "Graduate Engineer Trainee",
        "organization": "Acme",
        "job_category": "Private",
        "target_qualifications": ["B.Tech"],
        "last_application_date": datetime(2030, 3, 15),
        "status": "Active",
        "posted_by": None,
        "notification_tracking": {"notification_sent": True},
        "created_at": utcnow(),
    }
    job.update(overrides)
    job["_id"] = db[COLLECTIONS["jobs"]].insert_one(job).inserted_id
    return job


def insert_notification(db, job, student, is_read=False, minutes_ago=0):
    n = build_notification(job, student)
    n["is_read"] = is_read
    n["created_at"] = utcnow() - timedelta(minutes=minutes_ago)
    db[COLLECTIONS["notifications"]].insert_one(n)
    return n


def test_notifications_with_unread_count(client, auth, mongo_db, student_user):
    user, student = student_user
    job = insert_job(mongo_db)
    insert_notification(mongo_db, job, student, minutes_ago=10)
    newest = insert_notification(mongo_db, job, student, is_read=True)

    resp = client.get("/api/student/notifications", headers=auth(user))

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert body["unread_count"] == 1
    assert body["notifications"][0]["notification_id"] == newest["notification_id"]
    assert body["notifications"][0]["job"]["job_title"] == "Graduate Engineer Trainee"


def test_filter_unread(client, auth, mongo_db, student_user):
    user, student = student_user
    job = insert_job(mongo_db)
    insert_notification(mongo_db, job, student)
    insert_notification(mongo_db, job, student, is_read=True)

    resp = client.get("/api/student/notifications", params={"is_read": "false"}, headers=auth(user))

    assert resp.json()["total"] == 1
    assert resp.json()["notifications"][0]["is_read"] is False


def test_mark_as_read(client, auth, mongo_db, student_user):
    user, student = student_user
    n = insert_notification(mongo_db, insert_job(mongo_db), student)

    resp = client.put(f"/api/student/notifications/{n['notification_id']}/read", headers=auth(user))

    assert resp.status_code == 200
    stored = mongo_db[COLLECTIONS["notifications"]].find_one({"notification_id": n["notification_id"]})
    assert stored["is_read"] is True
    assert stored["read_at"] is not None


def test_cannot_touch_other_students_notification(client, auth, mongo_db, student_user, make_student):
    user, _ = student_user
    other = make_student(email="other@example.com")
    n = insert_notification(mongo_db, insert_job(mongo_db), other)

    resp = client.put(f"/api/student/notifications/{n['notification_id']}/read", headers=auth(user))
    assert resp.status_code == 404

    resp = client.delete(f"/api/student/notifications/{n['notification_id']}", headers=auth(user))
    assert resp.status_code == 404


def test_delete_notification(client, auth, mongo_db, student_user):
    user, student = student_user
    n = insert_notification(mongo_db, insert_job(mongo_db), student)

    resp = client.delete(f"/api/student/notifications/{n['notification_id']}", headers=auth(user))

    assert resp.json() == {"message": "Notification deleted", "success": True}
    assert mongo_db[COLLECTIONS["notifications"]].count_documents({}) == 0


def test_user_without_student_record_gets_404(client, auth, make_user):
    user = make_user(role="USER")
    resp = client.get("/api/student/notifications", headers=auth(user))
    assert resp.status_code == 404
    assert resp.json()["error"] == "Student profile not found"


def test_company_cannot_use_student_routes(client, auth, make_user):
    company = make_user(role="COMPANY")
    resp = client.get("/api/student/job-listings", headers=auth(company))
    assert resp.status_code == 403


def test_job_listings_match_qualification(client, auth, mongo_db, student_user):
    user, _ = student_user
    insert_job(mongo_db, job_id="JOB-1", job_title="Matching Active Job")
    insert_job(mongo_db, job_id="JOB-2", status="Closed")
    insert_job(mongo_db, job_id="JOB-3", target_qualifications=["MBA"])
    insert_job(mongo_db, job_id="JOB-4", job_category="Government")

    resp = client.get("/api/student/job-listings", headers=auth(user))

    body = resp.json()
    assert body["total"] == 2
    assert {j["job_id"] for j in body["jobs"]} == {"JOB-1", "JOB-4"}
    assert "notification_tracking" not in body["jobs"][0]
    assert "posted_by" not in body["jobs"][0]

    resp = client.get("/api/student/job-listings", params={"category": "Government"}, headers=auth(user))
    assert [j["job_id"] for j in resp.json()["jobs"]] == ["JOB-4"]


def test_empty_notifications_have_one_page(client, make_user, make_student, auth):
    user = make_user()
    make_student(user=user)
    body = client.get("/api/student/notifications", headers=auth(user)).json()
    assert body["total"] == 0
    assert body["total_pages"] == 1
