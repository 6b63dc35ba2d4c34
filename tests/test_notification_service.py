"""Job -> student notification fan-out."""
from datetime import datetime

from pymongo.errors import BulkWriteError

from student_portal.db.mongodb import COLLECTIONS
from student_portal.services.job_service import empty_tracking
from student_portal.services.notification_service import (
    NotificationService, build_notification_message, notify_students_for_job
)


def insert_job(db, **overrides):
    job = {
        "job_id": "JOB-1-abc",
        "job_title": "Assistant Section Officer",
        "organization": "APPSC",
        "job_category": "Private",
        "target_qualifications": ["B.Tech", "B.Sc"],
        "last_application_date": datetime(2030, 3, 15),
        "status": "Active",
        "govt_job_fields": None,
        "notification_tracking": empty_tracking(),
    }
    job.update(overrides)
    job["_id"] = db[COLLECTIONS["jobs"]].insert_one(job).inserted_id
    return job


def test_message_for_private_job():
    job = {
        "organization": "Acme",
        "job_title": "Backend Engineer",
        "job_category": "Private",
        "target_qualifications": ["B.Tech", "MBA"],
        "last_application_date": datetime(2030, 3, 15),
    }
    assert build_notification_message(job) == (
        "Acme is hiring for Backend Engineer. Qualifications: B.Tech, MBA. Last Date: 15 March 2030."
    )


def test_message_for_government_job_includes_exam_date():
    job = {
        "organization": "APPSC",
        "job_title": "Group II Services",
        "job_category": "Government",
        "target_qualifications": ["B.A"],
        "last_application_date": datetime(2030, 1, 5),
        "govt_job_fields": {"exam_date": datetime(2030, 6, 1)},
    }
    assert build_notification_message(job).endswith("Last Date: 5 January 2030. Exam Date: 1 June 2030.")


def test_only_active_students_with_alerts_and_matching_qualification(mongo_db, make_student):
    match = make_student(email="a@example.com", qualification="B.Tech")
    make_student(email="b@example.com", qualification="MBA")
    make_student(email="c@example.com", qualification="B.Sc", status="Inactive")
    make_student(email="d@example.com", qualification="B.Sc", alerts=False)
    job = insert_job(mongo_db)

    result = notify_students_for_job(job)

    assert result == {"success": True, "notified": 1, "message": "Successfully notified 1 students"}
    notifications = list(mongo_db[COLLECTIONS["notifications"]].find())
    assert len(notifications) == 1
    n = notifications[0]
    assert n["student_id"] == match["_id"]
    assert n["job_id"] == job["_id"]
    assert n["title"] == "New Private Job: Assistant Section Officer"
    assert n["is_read"] is False
    assert n["notification_id"].startswith("NOTIF-")
    assert n["important_dates"]["last_application_date"] == datetime(2030, 3, 15)
    assert n["important_dates"]["exam_date"] is None


def test_tracking_written_on_job(mongo_db, make_student):
    s1 = make_student(email="a@example.com")
    s2 = make_student(email="b@example.com", qualification="B.Sc")
    job = insert_job(mongo_db)

    notify_students_for_job(job)

    stored = mongo_db[COLLECTIONS["jobs"]].find_one({"_id": job["_id"]})
    tracking = stored["notification_tracking"]
    assert tracking["notification_sent"] is True
    assert set(tracking["notification_sent_to"]) == {s1["_id"], s2["_id"]}
    assert tracking["total_students_matched"] == 2
    assert tracking["notification_sent_date"] is not None
    assert job["notification_tracking"]["notification_sent"] is True


def test_no_match_leaves_job_untouched(mongo_db, make_student):
    make_student(email="a@example.com", qualification="10th")
    job = insert_job(mongo_db)

    result = notify_students_for_job(job)

    assert result == {"success": True, "notified": 0, "message": "No matching students found for this job"}
    stored = mongo_db[COLLECTIONS["jobs"]].find_one({"_id": job["_id"]})
    assert stored["notification_tracking"]["notification_sent"] is False
    assert mongo_db[COLLECTIONS["notifications"]].count_documents({}) == 0


def test_partial_bulk_failure_tracks_only_delivered(mongo_db, make_student, monkeypatch):
    s1 = make_student(email="a@example.com")
    make_student(email="b@example.com")
    s3 = make_student(email="c@example.com")
    job = insert_job(mongo_db)

    service = NotificationService()

    def failing_insert(docs, ordered=True):
        raise BulkWriteError({
            "nInserted": 2,
            "writeErrors": [{"index": 1, "code": 11000, "errmsg": "duplicate key"}],
        })

    monkeypatch.setattr(service.notifications, "insert_many", failing_insert)
    result = service.notify_students_for_job(job)

    assert result["success"] is True
    assert result["notified"] == 2
    assert result["message"].startswith("Partially notified 2 students")
    tracking = mongo_db[COLLECTIONS["jobs"]].find_one({"_id": job["_id"]})["notification_tracking"]
    assert tracking["total_students_matched"] == 3
    assert tracking["notification_sent_to"] == [s1["_id"], s3["_id"]]


def test_nothing_inserted_leaves_job_unsent(mongo_db, make_student, monkeypatch):
    make_student(email="a@example.com", qualification="B.Tech")
    make_student(email="b@example.com", qualification="B.Sc")
    job = insert_job(mongo_db)
    service = NotificationService()

    def failing_insert(docs, ordered=True):
        raise BulkWriteError({
            "nInserted": 0,
            "writeErrors": [
                {"index": 0, "code": 11000, "errmsg": "duplicate key"},
                {"index": 1, "code": 11000, "errmsg": "duplicate key"},
            ],
        })

    monkeypatch.setattr(service.notifications, "insert_many", failing_insert)
    result = service.notify_students_for_job(job)

    assert result["success"] is False
    assert result["notified"] == 0
    tracking = mongo_db[COLLECTIONS["jobs"]].find_one({"_id": job["_id"]})["notification_tracking"]
    assert tracking["notification_sent"] is False
    assert tracking["notification_sent_to"] == []


def test_count_matching_students(mongo_db, make_student):
    make_student(email="a@example.com", qualification="Diploma")
    make_student(email="b@example.com", qualification="Diploma", alerts=False)
    make_student(email="c@example.com", qualification="12th")

    service = NotificationService()
    assert service.count_matching_students(["Diploma", "12th"]) == 2
    assert service.count_matching_students(["MBA"]) == 0
