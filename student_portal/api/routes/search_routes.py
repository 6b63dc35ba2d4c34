"""
Search Routes

GET /search/people - Find users and companies by name or email
"""

import re
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from student_portal.core.auth import get_current_user
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.services.mongo_service import serialize_doc
from student_portal.utils.common import total_pages

router = APIRouter(prefix="/search", tags=["Search"])


@router.get("/people")
async def search_people(
    q: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    """Case-insensitive match on name or email, sorted by name."""
    text = (q or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail='Query parameter "q" is required')

    pattern = {"$regex": re.escape(text), "$options": "i"}
    query = {"$or": [{"name": pattern}, {"email": pattern}]}
    if role in ("USER", "COMPANY"):
        query["role"] = role

    collection = get_collection(COLLECTIONS["users"])
    total = collection.count_documents(query)
    users = collection.find(
        query,
        {"name": 1, "email": 1, "role": 1, "state": 1, "profile_image": 1, "plan": 1, "has_paid_plan": 1, "is_paid": 1}
    ).sort("name", 1).skip((page - 1) * limit).limit(limit)

    data = [
        serialize_doc({
            "id": u["_id"],
            "name": u.get("name"),
            "email": u.get("email"),
            "role": u.get("role"),
            "state": u.get("state"),
            "profile_image": u.get("profile_image"),
            "plan": u.get("plan"),
            "has_paid_plan": u.get("has_paid_plan", False),
            "is_paid": u.get("is_paid", False),
        })
        for u in users
    ]

    return {
        "success": True,
        "page": page,
        "pages": total_pages(total, limit),
        "count": len(data),
        "total": total,
        "data": data,
    }
