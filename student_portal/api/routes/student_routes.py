"""
Student Routes (USER role with a Student record)

GET /student/notifications - Dashboard notifications (+ unread count)
PUT /student/notifications/{notification_id}/read - Mark as read
DELETE /student/notifications/{notification_id} - Delete a notification
GET /student/job-listings - Active jobs for the student's qualification
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from student_portal.core.auth import get_current_student
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import JobCategory, MessageResponse
from student_portal.services.mongo_service import serialize_docs
from student_portal.utils.common import total_pages, utcnow

router = APIRouter(prefix="/student", tags=["Student"])

JOB_SUMMARY_FIELDS = {"job_id": 1, "job_title": 1, "organization": 1, "job_category": 1}


@router.get("/notifications")
async def get_notifications(
    is_read: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_student)
):
    """Notifications for the current student, newest first."""
    student_id = user["student"]["_id"]
    collection = get_collection(COLLECTIONS["notifications"])

    query = {"student_id": student_id}
    if is_read is not None:
        query["is_read"] = is_read

    notifications = list(
        collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit)
    )

    # Attach job summary
    job_ids = {n["job_id"] for n in notifications}
    jobs = {
        job["_id"]: job
        for job in get_collection(COLLECTIONS["jobs"]).find({"_id": {"$in": list(job_ids)}}, JOB_SUMMARY_FIELDS)
    }
    for notification in notifications:
        notification["job"] = jobs.get(notification["job_id"])

    total = collection.count_documents(query)
    unread_count = collection.count_documents({"student_id": student_id, "is_read": False})

    return {
        "success": True,
        "notifications": serialize_docs(notifications),
        "total": total,
        "unread_count": unread_count,
        "current_page": page,
        "total_pages": total_pages(total, limit),
    }


@router.put("/notifications/{notification_id}/read")
async def mark_as_read(notification_id: str, user: dict = Depends(get_current_student)):
    collection = get_collection(COLLECTIONS["notifications"])
    query = {"notification_id": notification_id, "student_id": user["student"]["_id"]}

    if not collection.find_one(query, {"_id": 1}):
        raise HTTPException(status_code=404, detail="Notification not found")

    read_at = utcnow()
    collection.update_one(query, {"$set": {"is_read": True, "read_at": read_at}})

    return {
        "success": True,
        "notification": {"notification_id": notification_id, "is_read": True, "read_at": read_at},
    }


@router.delete("/notifications/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: str, user: dict = Depends(get_current_student)):
    result = get_collection(COLLECTIONS["notifications"]).delete_one(
        {"notification_id": notification_id, "student_id": user["student"]["_id"]}
    )
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Notification not found")
    return MessageResponse(message="Notification deleted")


@router.get("/job-listings")
async def get_job_listings(
    category: Optional[JobCategory] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_student)
):
    """Active jobs that target the student's qualification."""
    query = {"target_qualifications": user["student"]["qualification"], "status": "Active"}
    if category:
        query["job_category"] = category.value

    collection = get_collection(COLLECTIONS["jobs"])
    total = collection.count_documents(query)
    jobs = collection.find(query, {"notification_tracking": 0, "posted_by": 0}) \
        .sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit)

    return {
        "success": True,
        "jobs": serialize_docs(jobs),
        "total": total,
        "current_page": page,
        "total_pages": total_pages(total, limit),
    }
