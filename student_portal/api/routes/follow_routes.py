"""
Follow Routes

POST /follows/{target_user_id} - Follow / unfollow toggle
GET /follows/{target_user_id}/status - Does the caller follow the target
GET /follows/{user_id}/followers - Who follows a user
GET /follows/{user_id}/following - Who a user follows
"""

from fastapi import APIRouter, HTTPException, Depends, Query, Request
from pymongo.errors import DuplicateKeyError

from student_portal.core.auth import get_current_user
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import serialize_doc, populate_users
from student_portal.utils.common import parse_object_id, total_pages, utcnow

router = APIRouter(prefix="/follows", tags=["Follows"])

PERSON_FIELDS = {"name": 1, "email": 1, "role": 1, "profile_image": 1}


def _page(query: dict, person_field: str, page: int, limit: int) -> dict:
    collection = get_collection(COLLECTIONS["follows"])
    total = collection.count_documents(query)
    rows = list(collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit))
    populate_users(rows, person_field, PERSON_FIELDS)

    return {
        "success": True,
        "page": page,
        "pages": total_pages(total, limit),
        "count": len(rows),
        "total": total,
        "data": [
            serialize_doc({"id": r["_id"], person_field: r[person_field], "created_at": r.get("created_at")})
            for r in rows
        ],
    }


@router.post("/{target_user_id}")
async def toggle_follow(target_user_id: str, request: Request, user: dict = Depends(get_current_user)):
    target_id = parse_object_id(target_user_id, "target_user_id")
    if target_id == user["_id"]:
        raise HTTPException(status_code=400, detail="You cannot follow yourself")

    target = get_collection(COLLECTIONS["users"]).find_one({"_id": target_id}, PERSON_FIELDS)
    if not target:
        raise HTTPException(status_code=404, detail="Target user not found")

    follows = get_collection(COLLECTIONS["follows"])
    edge = {"follower": user["_id"], "following": target_id}
    if follows.find_one(edge):
        follows.delete_one(edge)
        following_now = False
    else:
        try:
            follows.insert_one({**edge, "created_at": utcnow()})
        except DuplicateKeyError:
            pass  # edge already exists
        following_now = True

    followers_count = follows.count_documents({"following": target_id})
    my_following_count = follows.count_documents({"follower": user["_id"]})

    log_activity(
        request, user, "FOLLOW" if following_now else "UNFOLLOW", "USER", target_id,
        "User followed another user" if following_now else "User unfollowed another user",
        {"target_role": target.get("role")}
    )

    return {
        "success": True,
        "following": following_now,
        "target": serialize_doc({
            "id": target["_id"],
            "name": target.get("name"),
            "role": target.get("role"),
            "profile_image": target.get("profile_image"),
        }),
        "followers_count": followers_count,
        "my_following_count": my_following_count,
    }


@router.get("/{target_user_id}/status")
async def follow_status(target_user_id: str, user: dict = Depends(get_current_user)):
    target_id = parse_object_id(target_user_id, "target_user_id")
    exists = get_collection(COLLECTIONS["follows"]).count_documents(
        {"follower": user["_id"], "following": target_id}, limit=1
    )
    return {"success": True, "following": bool(exists)}


@router.get("/{user_id}/followers")
async def get_followers(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    return _page({"following": parse_object_id(user_id, "user_id")}, "follower", page, limit)


@router.get("/{user_id}/following")
async def get_following(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    return _page({"follower": parse_object_id(user_id, "user_id")}, "following", page, limit)
