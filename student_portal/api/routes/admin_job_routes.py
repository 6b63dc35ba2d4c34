"""
Admin Job Routes (ADMIN / SUPER_ADMIN)

POST /admin/jobs - Create job posting and notify matching students
GET /admin/jobs - List job postings (category/status filters)
POST /admin/jobs/check-matching - Count students a posting would reach
GET /admin/jobs/{job_id} - Job with notification status
PUT /admin/jobs/{job_id} - Update job posting
DELETE /admin/jobs/{job_id} - Soft delete (status Closed)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from student_portal.core.auth import get_current_admin
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import (
    CheckMatchingRequest, JobCategory, JobCreate, JobStatus, JobUpdate, MessageResponse
)
from student_portal.services.job_service import (
    apply_job_update, empty_tracking, should_notify, validate_category_fields, validate_future_date
)
from student_portal.services.mongo_service import serialize_doc, populate_users
from student_portal.services.notification_service import (
    get_notification_service, safe_notify_students_for_job
)
from student_portal.utils.common import generate_public_id, total_pages, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/jobs", tags=["Admin Jobs"])


def _get_job_or_404(job_id: str) -> dict:
    job = get_collection(COLLECTIONS["jobs"]).find_one({"job_id": job_id})
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("", status_code=201)
async def create_job(body: JobCreate, admin: dict = Depends(get_current_admin)):
    """Create a job posting. Active postings are fanned out to matching students."""
    validate_future_date(body.last_application_date)

    job = body.model_dump()
    if job["job_category"] == "Government":
        job["private_job_fields"] = None
    else:
        job["govt_job_fields"] = None
    validate_category_fields(job)

    now = utcnow()
    job.update({
        "job_id": generate_public_id("JOB"),
        "posted_by": admin["_id"],
        "notification_tracking": empty_tracking(),
        "created_at": now,
        "updated_at": now,
    })
    job["_id"] = get_collection(COLLECTIONS["jobs"]).insert_one(job).inserted_id
    logger.info("Job %s created by %s", job["job_id"], admin["_id"])

    total_notified = 0
    if should_notify(job):
        result = safe_notify_students_for_job(job)
        if result:
            total_notified = result["notified"]

    return {
        "success": True,
        "message": f"Job posted successfully! Notified {total_notified} students via dashboard",
        "job_id": job["job_id"],
        "total_notified": total_notified,
        "job": serialize_doc(job),
    }


@router.get("")
async def list_jobs(
    category: Optional[JobCategory] = Query(None),
    status: Optional[JobStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    admin: dict = Depends(get_current_admin)
):
    """List job postings, newest first."""
    query = {}
    if category:
        query["job_category"] = category.value
    if status:
        query["status"] = status.value

    collection = get_collection(COLLECTIONS["jobs"])
    total = collection.count_documents(query)
    cursor = collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit)

    jobs = [
        {
            "job_id": job["job_id"],
            "job_title": job["job_title"],
            "organization": job["organization"],
            "job_category": job["job_category"],
            "total_notified": (job.get("notification_tracking") or {}).get("total_students_matched", 0),
            "status": job["status"],
            "created_at": job.get("created_at"),
        }
        for job in cursor
    ]

    return {
        "success": True,
        "jobs": jobs,
        "total_jobs": total,
        "current_page": page,
        "total_pages": total_pages(total, limit),
    }


@router.post("/check-matching")
async def check_matching(body: CheckMatchingRequest, admin: dict = Depends(get_current_admin)):
    """How many students would be notified for these qualifications."""
    count = get_notification_service().count_matching_students(body.target_qualifications)
    return {
        "success": True,
        "matching_count": count,
        "message": f"This job will notify {count} students",
    }


@router.get("/{job_id}")
async def get_job(job_id: str, admin: dict = Depends(get_current_admin)):
    """Job details with populated poster and recipients."""
    job = _get_job_or_404(job_id)
    tracking = job.get("notification_tracking") or empty_tracking()

    recipients = []
    if tracking.get("notification_sent_to"):
        recipients = list(get_collection(COLLECTIONS["students"]).find(
            {"_id": {"$in": tracking["notification_sent_to"]}},
            {"name": 1, "email": 1, "qualification": 1}
        ))
    tracking["notification_sent_to"] = recipients
    job["notification_tracking"] = tracking
    populate_users([job], "posted_by", {"name": 1, "email": 1})

    return {
        "success": True,
        "job": serialize_doc(job),
        "notification_status": {
            "total_sent": len(recipients),
            "sent_date": tracking.get("notification_sent_date"),
            "total_matched": tracking.get("total_students_matched", 0),
        },
    }


@router.put("/{job_id}")
async def update_job(job_id: str, body: JobUpdate, admin: dict = Depends(get_current_admin)):
    """Update allowed fields; field groups are merged, category rules re-checked."""
    job = _get_job_or_404(job_id)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("last_application_date") is not None:
        validate_future_date(changes["last_application_date"])

    updates = apply_job_update(job, changes)
    validate_category_fields(job)

    if updates:
        updates["updated_at"] = utcnow()
        job["updated_at"] = updates["updated_at"]
        get_collection(COLLECTIONS["jobs"]).update_one({"_id": job["_id"]}, {"$set": updates})

    total_notified = None
    if should_notify(job):
        result = safe_notify_students_for_job(job)
        total_notified = result["notified"] if result else 0

    response = {
        "success": True,
        "message": "Job updated successfully",
        "job": serialize_doc(job),
    }
    if total_notified is not None:
        response["total_notified"] = total_notified
    return response


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, admin: dict = Depends(get_current_admin)):
    """Soft delete: the posting is closed, not removed."""
    job = _get_job_or_404(job_id)
    get_collection(COLLECTIONS["jobs"]).update_one(
        {"_id": job["_id"]},
        {"$set": {"status": "Closed", "updated_at": utcnow()}}
    )
    return MessageResponse(message="Job deleted successfully")
