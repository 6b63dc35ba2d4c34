"""
Activity Routes (SUPER_ADMIN)

GET /activities/dashboard - Filtered, paginated activity log
GET /activities/stats - Totals by role, action and resource type
GET /activities/user/{user_id} - One user's activity
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from student_portal.core.auth import get_current_super_admin
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import ActivityAction, ResourceType, UserRole
from student_portal.services.mongo_service import serialize_docs, populate_users
from student_portal.utils.common import parse_object_id, to_naive_utc, total_pages

router = APIRouter(prefix="/activities", tags=["Activities"])


def _paged(query: dict, page: int, limit: int) -> dict:
    collection = get_collection(COLLECTIONS["activities"])
    total = collection.count_documents(query)
    rows = list(collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit))
    populate_users(rows, "user_id", {"name": 1, "email": 1, "phone": 1, "role": 1})
    return {
        "success": True,
        "data": serialize_docs(rows),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": total_pages(total, limit),
        },
    }


def _group_counts(field: str) -> list:
    pipeline = [
        {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
    ]
    return list(get_collection(COLLECTIONS["activities"]).aggregate(pipeline))


@router.get("/dashboard")
async def get_activity_dashboard(
    role: Optional[UserRole] = Query(None),
    action: Optional[ActivityAction] = Query(None),
    resource_type: Optional[ResourceType] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: dict = Depends(get_current_super_admin)
):
    query = {}
    if role:
        query["user_role"] = role.value
    if action:
        query["action"] = action.value
    if resource_type:
        query["resource_type"] = resource_type.value
    if start_date or end_date:
        query["created_at"] = {}
        if start_date:
            query["created_at"]["$gte"] = to_naive_utc(start_date)
        if end_date:
            query["created_at"]["$lte"] = to_naive_utc(end_date)
    return _paged(query, page, limit)


@router.get("/stats")
async def get_activity_stats(user: dict = Depends(get_current_super_admin)):
    collection = get_collection(COLLECTIONS["activities"])
    recent = list(collection.find().sort([("created_at", -1), ("_id", -1)]).limit(10))
    populate_users(recent, "user_id", {"name": 1, "role": 1})

    return {
        "success": True,
        "data": {
            "total": collection.count_documents({}),
            "by_role": _group_counts("user_role"),
            "by_action": _group_counts("action"),
            "by_resource_type": _group_counts("resource_type"),
            "recent": serialize_docs(recent),
        },
    }


@router.get("/user/{user_id}")
async def get_user_activities(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    user: dict = Depends(get_current_super_admin)
):
    return _paged({"user_id": parse_object_id(user_id, "user id")}, page, limit)
