"""
User Routes - public-facing profile cards

GET /users/{user_id}/profile - Profile with counts and follow status (authenticated)
GET /users/{user_id}/stats - Follower / following / post counts (public)
"""

from fastapi import APIRouter, HTTPException, Depends

from student_portal.core.auth import get_current_user
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.services.mongo_service import serialize_doc
from student_portal.utils.common import parse_object_id

router = APIRouter(prefix="/users", tags=["Users"])

PROFILE_FIELDS = {
    "name": 1, "email": 1, "role": 1, "profile_image": 1, "state": 1,
    "plan": 1, "has_paid_plan": 1, "is_paid": 1,
}


def _counts(user_id) -> dict:
    follows = get_collection(COLLECTIONS["follows"])
    return {
        "followers_count": follows.count_documents({"following": user_id}),
        "following_count": follows.count_documents({"follower": user_id}),
        "posts_count": get_collection(COLLECTIONS["posts"]).count_documents({"author": user_id}),
    }


def _company_details(user: dict):
    company = get_collection(COLLECTIONS["companies"]).find_one({"user_id": user["_id"]})
    if not company:
        return None
    return {
        "company_id": company["_id"],
        "company_name": company.get("company_name"),
        "industry": company.get("industry"),
        "website": company.get("website"),
        "logo": company.get("logo"),
        "tagline": company.get("tagline"),
        "about": company.get("about"),
        "recruiter": company.get("recruiter"),
        "verification_status": company.get("verification_status"),
    }


def _profile_details(user: dict):
    if not user.get("email"):
        return None
    profile = get_collection(COLLECTIONS["user_profiles"]).find_one({"email": user["email"].lower()})
    if not profile:
        return None
    return {
        "profile_id": profile["_id"],
        "full_name": profile.get("full_name"),
        "profile_photo": profile.get("profile_photo"),
        "bio": profile.get("bio"),
        "current_city": profile.get("current_city"),
        "skills": profile.get("skills"),
        "social_links": profile.get("social_links"),
        "resume_url": profile.get("resume_url"),
    }


@router.get("/{user_id}/profile")
async def get_user_profile_details(user_id: str, current: dict = Depends(get_current_user)):
    uid = parse_object_id(user_id, "userId")
    user = get_collection(COLLECTIONS["users"]).find_one({"_id": uid}, PROFILE_FIELDS)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    is_following = get_collection(COLLECTIONS["follows"]).count_documents(
        {"follower": current["_id"], "following": uid}, limit=1
    )
    details = _company_details(user) if user.get("role") == "COMPANY" else _profile_details(user)

    return {
        "success": True,
        "data": serialize_doc({
            "id": user["_id"],
            "name": user.get("name"),
            "email": user.get("email"),
            "role": user.get("role"),
            "state": user.get("state"),
            "profile_image": user.get("profile_image"),
            **_counts(uid),
            "is_following": bool(is_following),
            "plan": user.get("plan"),
            "has_paid_plan": user.get("has_paid_plan", False),
            "is_paid": user.get("is_paid", False),
            "details": details,
        }),
    }


@router.get("/{user_id}/stats")
async def get_user_stats(user_id: str):
    uid = parse_object_id(user_id, "userId")
    user = get_collection(COLLECTIONS["users"]).find_one({"_id": uid}, {"name": 1, "role": 1, "profile_image": 1})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "success": True,
        "data": serialize_doc({
            "id": user["_id"],
            "name": user.get("name"),
            "role": user.get("role"),
            "profile_image": user.get("profile_image"),
            **_counts(uid),
        }),
    }
