"""
User Profile Routes - student profile documents keyed by email

POST /user-profiles - Create profile
GET /user-profiles - List profiles (or ?email= for one)
GET /user-profiles/{id} - Get profile
PATCH /user-profiles/{id} - Partial update (nested objects merged field by field)
DELETE /user-profiles/{id} - Delete profile
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from student_portal.core.auth import get_current_user
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import MessageResponse, UserProfileCreate, UserProfileUpdate
from student_portal.services.mongo_service import serialize_doc, serialize_docs
from student_portal.utils.common import parse_object_id, utcnow

router = APIRouter(prefix="/user-profiles", tags=["User Profiles"])


def flatten_for_set(data: dict, prefix: str = "") -> dict:
    """
    {"a": {"b": 1}} -> {"a.b": 1}

    Lists are leaf values (replaced whole).
    """
    out = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict) and value:
            out.update(flatten_for_set(value, path))
        else:
            out[path] = value
    return out


def _email_in_use(email: str, exclude_id=None) -> bool:
    query = {"email": email}
    if exclude_id is not None:
        query["_id"] = {"$ne": exclude_id}
    return get_collection(COLLECTIONS["user_profiles"]).count_documents(query, limit=1) > 0


@router.post("", status_code=201)
async def create_user_profile(body: UserProfileCreate, user: dict = Depends(get_current_user)):
    profile = body.model_dump()
    if _email_in_use(profile["email"]):
        raise HTTPException(status_code=400, detail="Email already exists")

    now = utcnow()
    profile["created_at"] = now
    profile["updated_at"] = now
    try:
        profile["_id"] = get_collection(COLLECTIONS["user_profiles"]).insert_one(profile).inserted_id
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already exists")

    return {"success": True, "data": serialize_doc(profile)}


@router.get("")
async def list_user_profiles(email: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    collection = get_collection(COLLECTIONS["user_profiles"])
    if email:
        profile = collection.find_one({"email": email.strip().lower()})
        if not profile:
            raise HTTPException(status_code=404, detail="User profile not found")
        return {"success": True, "data": serialize_doc(profile)}

    profiles = serialize_docs(collection.find().sort([("created_at", -1), ("_id", -1)]))
    return {"success": True, "count": len(profiles), "data": profiles}


@router.get("/{profile_id}")
async def get_user_profile(profile_id: str, user: dict = Depends(get_current_user)):
    profile = get_collection(COLLECTIONS["user_profiles"]).find_one({"_id": parse_object_id(profile_id)})
    if not profile:
        raise HTTPException(status_code=404, detail="User profile not found")
    return {"success": True, "data": serialize_doc(profile)}


@router.patch("/{profile_id}")
async def update_user_profile(profile_id: str, body: UserProfileUpdate, user: dict = Depends(get_current_user)):
    oid = parse_object_id(profile_id)
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields provided to update")

    collection = get_collection(COLLECTIONS["user_profiles"])
    current = collection.find_one({"_id": oid})
    if not current:
        raise HTTPException(status_code=404, detail="User profile not found")

    updates = {}
    for key, value in changes.items():
        # dot paths only work below an existing sub-document
        if isinstance(value, dict) and isinstance(current.get(key), dict):
            updates.update(flatten_for_set(value, key))
        else:
            updates[key] = value

    if updates.get("email") and _email_in_use(updates["email"], exclude_id=oid):
        raise HTTPException(status_code=400, detail="Email already exists")

    updates["updated_at"] = utcnow()
    try:
        updated = collection.find_one_and_update(
            {"_id": oid}, {"$set": updates}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already exists")

    if not updated:
        raise HTTPException(status_code=404, detail="User profile not found")
    return {"success": True, "data": serialize_doc(updated)}


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_user_profile(profile_id: str, user: dict = Depends(get_current_user)):
    result = get_collection(COLLECTIONS["user_profiles"]).delete_one({"_id": parse_object_id(profile_id)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="User profile not found")
    return MessageResponse(message="User profile deleted")
