"""Admin job postings and the fan-out they trigger."""
from datetime import timedelta

import pytest

from student_portal.db.mongodb import COLLECTIONS
from student_portal.utils.common import utcnow


def future_iso(days=30):
    return (utcnow() + timedelta(days=days)).isoformat()


def private_job(**overrides):
    job = {
        "job_title": "Backend Engineer Trainee",
        "organization": "Acme Technologies",
        "job_category": "Private",
        "job_description": "Build and maintain REST APIs for the student portal platform and its services.",
        "target_qualifications": ["B.Tech"],
        "total_positions": 5,
        "last_application_date": future_iso(),
        "private_job_fields": {
            "work_mode": "Hybrid",
            "job_location": ["Hyderabad"],
            "salary_range": {"min": 300000, "max": 600000},
            "hr_contact_email": "hr@acme.com",
            "hr_contact_phone": "9000011111",
        },
    }
    job.update(overrides)
    return job


def government_job(**overrides):
    job = {
        "job_title": "Group II Services Officer",
        "organization": "APPSC",
        "job_category": "Government",
        "job_description": "Recruitment to Group II services posts in various departments of the state.",
        "target_qualifications": ["B.A", "B.Com"],
        "total_positions": 100,
        "last_application_date": future_iso(),
        "govt_job_fields": {
            "notifying_authority": "APPSC",
            "post_code": "G2-2030",
            "grade": "Class 2",
            "pay_scale": {"min": 30000, "max": 90000},
            "exam_date": future_iso(90),
            "official_link": "https://psc.ap.gov.in",
        },
    }
    job.update(overrides)
    return job


@pytest.fixture
def admin(make_user):
    return make_user(role="ADMIN")


def test_create_private_job_notifies_matching_students(client, admin, auth, make_student, mongo_db):
    make_student(email="a@example.com", qualification="B.Tech")
    make_student(email="b@example.com", qualification="MBA")

    resp = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin))

    assert resp.status_code == 201
    body = resp.json()
    assert body["total_notified"] == 1
    assert body["job_id"].startswith("JOB-")
    assert body["message"] == "Job posted successfully! Notified 1 students via dashboard"
    assert body["job"]["status"] == "Active"
    assert body["job"]["posted_by"] == str(admin["_id"])
    assert body["job"]["govt_job_fields"] is None
    assert mongo_db[COLLECTIONS["notifications"]].count_documents({}) == 1


def test_create_government_job(client, admin, auth, make_student, mongo_db):
    make_student(email="a@example.com", qualification="B.A")

    resp = client.post("/api/admin/jobs", json=government_job(), headers=auth(admin))

    assert resp.status_code == 201
    notification = mongo_db[COLLECTIONS["notifications"]].find_one()
    assert notification["title"] == "New Government Job: Group II Services Officer"
    assert "Exam Date:" in notification["message"]


def test_draft_job_is_not_fanned_out(client, admin, auth, make_student, mongo_db):
    make_student(email="a@example.com", qualification="B.Tech")

    resp = client.post("/api/admin/jobs", json=private_job(status="Draft"), headers=auth(admin))

    assert resp.status_code == 201
    assert resp.json()["total_notified"] == 0
    assert mongo_db[COLLECTIONS["notifications"]].count_documents({}) == 0


def test_fan_out_failure_does_not_fail_creation(client, admin, auth, make_student, mongo_db, monkeypatch):
    make_student(email="a@example.com", qualification="B.Tech")

    def boom(job):
        raise RuntimeError("mongo down")

    monkeypatch.setattr("student_portal.services.notification_service.notify_students_for_job", boom)
    resp = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin))

    assert resp.status_code == 201
    assert resp.json()["total_notified"] == 0
    assert mongo_db[COLLECTIONS["jobs"]].count_documents({}) == 1


def test_user_cannot_create_jobs(client, make_user, auth):
    user = make_user(role="USER")
    resp = client.post("/api/admin/jobs", json=private_job(), headers=auth(user))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Role USER is not authorized"


@pytest.mark.parametrize("overrides,message", [
    ({"last_application_date": "2001-01-01T00:00:00"}, "Last application date must be in the future"),
    ({"private_job_fields": None}, "Private job fields are required"),
])
def test_create_job_validation(client, admin, auth, overrides, message):
    resp = client.post("/api/admin/jobs", json=private_job(**overrides), headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json()["error"] == message


def test_create_job_requires_target_qualifications(client, admin, auth):
    resp = client.post("/api/admin/jobs", json=private_job(target_qualifications=[]), headers=auth(admin))
    assert resp.status_code == 400
    assert "target_qualifications" in resp.json()["error"]


def test_private_job_missing_fields_listed(client, admin, auth):
    fields = private_job()["private_job_fields"]
    fields.pop("hr_contact_email")
    fields["job_location"] = []
    resp = client.post("/api/admin/jobs", json=private_job(private_job_fields=fields), headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing private job fields: job_location, hr_contact_email"


def test_government_job_needs_pay_scale_range(client, admin, auth):
    fields = government_job()["govt_job_fields"]
    fields["pay_scale"] = {"min": 30000}
    resp = client.post("/api/admin/jobs", json=government_job(govt_job_fields=fields), headers=auth(admin))
    assert resp.status_code == 400
    assert "pay_scale.min/max" in resp.json()["error"]


def test_list_jobs_filters_and_counts(client, admin, auth, make_student):
    make_student(email="a@example.com", qualification="B.Tech")
    client.post("/api/admin/jobs", json=private_job(), headers=auth(admin))
    client.post("/api/admin/jobs", json=government_job(), headers=auth(admin))

    resp = client.get("/api/admin/jobs", params={"category": "Private"}, headers=auth(admin))

    body = resp.json()
    assert body["total_jobs"] == 1
    assert body["total_pages"] == 1
    assert body["jobs"][0]["total_notified"] == 1
    assert body["jobs"][0]["job_category"] == "Private"


def test_get_job_with_notification_status(client, admin, auth, make_student):
    student = make_student(email="a@example.com", qualification="B.Tech")
    job_id = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin)).json()["job_id"]

    resp = client.get(f"/api/admin/jobs/{job_id}", headers=auth(admin))

    body = resp.json()
    assert body["notification_status"]["total_sent"] == 1
    assert body["notification_status"]["total_matched"] == 1
    recipients = body["job"]["notification_tracking"]["notification_sent_to"]
    assert recipients[0]["_id"] == str(student["_id"])
    assert body["job"]["posted_by"]["name"] == admin["name"]


def test_get_unknown_job_is_404(client, admin, auth):
    resp = client.get("/api/admin/jobs/JOB-0-nothing", headers=auth(admin))
    assert resp.status_code == 404


def test_activating_draft_triggers_fan_out_once(client, admin, auth, make_student, mongo_db):
    make_student(email="a@example.com", qualification="B.Tech")
    job_id = client.post("/api/admin/jobs", json=private_job(status="Draft"), headers=auth(admin)).json()["job_id"]

    resp = client.put(f"/api/admin/jobs/{job_id}", json={"status": "Active"}, headers=auth(admin))
    assert resp.status_code == 200
    assert resp.json()["total_notified"] == 1

    resp = client.put(f"/api/admin/jobs/{job_id}", json={"featured": True}, headers=auth(admin))
    assert "total_notified" not in resp.json()
    assert mongo_db[COLLECTIONS["notifications"]].count_documents({}) == 1


def test_update_merges_field_groups(client, admin, auth, mongo_db):
    job_id = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin)).json()["job_id"]

    resp = client.put(
        f"/api/admin/jobs/{job_id}",
        json={"private_job_fields": {"industry": "Software"}},
        headers=auth(admin)
    )

    assert resp.status_code == 200
    fields = mongo_db[COLLECTIONS["jobs"]].find_one({"job_id": job_id})["private_job_fields"]
    assert fields["industry"] == "Software"
    assert fields["hr_contact_email"] == "hr@acme.com"


def test_update_rejects_past_deadline(client, admin, auth):
    job_id = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin)).json()["job_id"]
    resp = client.put(
        f"/api/admin/jobs/{job_id}",
        json={"last_application_date": "2001-01-01T00:00:00"},
        headers=auth(admin)
    )
    assert resp.status_code == 400


def test_delete_is_soft(client, admin, auth, mongo_db):
    job_id = client.post("/api/admin/jobs", json=private_job(), headers=auth(admin)).json()["job_id"]

    resp = client.delete(f"/api/admin/jobs/{job_id}", headers=auth(admin))

    assert resp.status_code == 200
    assert mongo_db[COLLECTIONS["jobs"]].find_one({"job_id": job_id})["status"] == "Closed"


def test_check_matching(client, make_user, auth, make_student):
    super_admin = make_user(role="SUPER_ADMIN")
    make_student(email="a@example.com", qualification="12th")
    make_student(email="b@example.com", qualification="12th")

    resp = client.post(
        "/api/admin/jobs/check-matching",
        json={"target_qualifications": ["12th"]},
        headers=auth(super_admin)
    )

    assert resp.json()["matching_count"] == 2
    assert resp.json()["message"] == "This job will notify 2 students"


def test_empty_job_list_has_one_page(client, admin, auth):
    body = client.get("/api/admin/jobs", headers=auth(admin)).json()
    assert body["jobs"] == []
    assert body["total_jobs"] == 0
    assert body["total_pages"] == 1


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 51}, {"page": 0}])
def test_job_list_pagination_bounds(client, admin, auth, params):
    resp = client.get("/api/admin/jobs", params=params, headers=auth(admin))
    assert resp.status_code == 400
    assert resp.json()["success"] is False
