"""
Notification Service - fan a job posting out to matching students.

Flow:
1. Find Active students whose qualification is targeted and who have job alerts on
2. Build one dashboard notification per student
3. Bulk insert (unordered, so one bad row does not stop the rest)
4. Record delivery on the job's notification_tracking

Called by the admin job routes. Callers treat failures as non-fatal.
"""

import logging
from typing import List, Optional

from pymongo.collection import Collection
from pymongo.errors import BulkWriteError

from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.utils.common import format_long_date, generate_public_id, utcnow

logger = logging.getLogger(__name__)


def matching_students_query(target_qualifications: List[str]) -> dict:
    """Mongo filter for students that should hear about a job."""
    return {
        "qualification": {"$in": list(target_qualifications or [])},
        "status": "Active",
        "job_alerts.enabled": True,
    }


def build_notification_message(job: dict) -> str:
    """'<org> is hiring for <title>. Qualifications: <q>. Last Date: <date>.' (+ exam date for govt jobs)"""
    qualifications = ", ".join(job.get("target_qualifications", []))
    message = (
        f"{job['organization']} is hiring for {job['job_title']}. "
        f"Qualifications: {qualifications}. "
        f"Last Date: {format_long_date(job['last_application_date'])}."
    )

    govt = job.get("govt_job_fields") or {}
    if job.get("job_category") == "Government" and govt.get("exam_date"):
        message += f" Exam Date: {format_long_date(govt['exam_date'])}."
    return message


def build_notification(job: dict, student: dict) -> dict:
    govt = job.get("govt_job_fields") or {}
    return {
        "notification_id": generate_public_id("NOTIF"),
        "student_id": student["_id"],
        "job_id": job["_id"],
        "job_title": job["job_title"],
        "organization": job["organization"],
        "job_category": job["job_category"],
        "title": f"New {job['job_category']} Job: {job['job_title']}",
        "message": build_notification_message(job),
        "important_dates": {
            "last_application_date": job.get("last_application_date"),
            "exam_date": govt.get("exam_date"),
            "admit_card_date": govt.get("admit_card_date"),
            "result_date": govt.get("result_date"),
        },
        "is_read": False,
        "read_at": None,
        "created_at": utcnow(),
    }


class NotificationService:
    """
    Creates notifications for students and keeps the job's tracking block in sync.
    """

    def __init__(self):
        self.students: Collection = get_collection(COLLECTIONS["students"])
        self.notifications: Collection = get_collection(COLLECTIONS["notifications"])
        self.jobs: Collection = get_collection(COLLECTIONS["jobs"])

    def count_matching_students(self, target_qualifications: List[str]) -> int:
        return self.students.count_documents(matching_students_query(target_qualifications))

    def notify_students_for_job(self, job: dict) -> dict:
        """
        Notify every matching student about a job.

        Args:
            job: Job posting document (must include _id)

        Returns:
            {"success": bool, "notified": int, "message": str}

        Raises:
            Any database error other than a partial bulk-write failure.
        """
        students = list(self.students.find(
            matching_students_query(job.get("target_qualifications")),
            {"_id": 1, "email": 1, "name": 1, "qualification": 1}
        ))

        if not students:
            logger.info("No matching students found for job %s", job.get("job_id"))
            return {
                "success": True,
                "notified": 0,
                "message": "No matching students found for this job",
            }

        notifications = [build_notification(job, student) for student in students]
        delivered = [student["_id"] for student in students]
        partial = False

        try:
            result = self.notifications.insert_many(notifications, ordered=False)
            notified = len(result.inserted_ids)
        except BulkWriteError as e:
            failed = {err.get("index") for err in e.details.get("writeErrors", [])}
            delivered = [sid for i, sid in enumerate(delivered) if i not in failed]
            notified = e.details.get("nInserted", len(delivered))
            partial = True
            logger.error("Partial notification failure for job %s: %d of %d inserted",
                         job.get("job_id"), notified, len(students))

        if notified == 0:
            # tracking stays unsent so a later update retries the fan-out
            return {
                "success": False,
                "notified": 0,
                "message": "No notifications could be delivered for this job",
            }

        tracking = {
            "notification_sent": True,
            "notification_sent_to": delivered,
            "notification_sent_date": utcnow(),
            "total_students_matched": len(students),
        }
        self.jobs.update_one({"_id": job["_id"]}, {"$set": {"notification_tracking": tracking}})
        job["notification_tracking"] = tracking

        if partial:
            return {
                "success": True,
                "notified": notified,
                "message": f"Partially notified {notified} students. Some notifications failed.",
            }

        logger.info("Notified %d students for job %s", notified, job.get("job_id"))
        return {
            "success": True,
            "notified": notified,
            "message": f"Successfully notified {notified} students",
        }


def get_notification_service() -> NotificationService:
    return NotificationService()


def notify_students_for_job(job: dict) -> dict:
    """Module-level shortcut used by the job routes."""
    return get_notification_service().notify_students_for_job(job)


def safe_notify_students_for_job(job: dict) -> Optional[dict]:
    """Run the fan-out; on failure log and return None."""
    try:
        return notify_students_for_job(job)
    except Exception as e:
        logger.error("Notification fan-out failed for job %s: %s", job.get("job_id"), e)
        return None
