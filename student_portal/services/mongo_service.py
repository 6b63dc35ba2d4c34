"""
MongoDB Service - serialization and lookup helpers shared by the routes.

Documents are stored with ObjectId references (users, tickets, posts).
Everything leaving the API goes through serialize_doc so those ids become strings.
"""

from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId

from student_portal.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def _convert(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _convert(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_convert(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict (nested ObjectIds included)."""
    if doc is None:
        return None
    return _convert(doc)


def serialize_docs(docs: Iterable[dict]) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


# ============================================================
# USER LOOKUPS ("populate")
# ============================================================

USER_PUBLIC_FIELDS = {"name": 1, "email": 1, "phone": 1, "role": 1, "state": 1, "profile_image": 1}


def get_users_by_ids(user_ids: Iterable[ObjectId], projection: Optional[dict] = None) -> Dict[ObjectId, dict]:
    """Fetch users in one query, keyed by _id."""
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    cursor = get_collection(COLLECTIONS["users"]).find(
        {"_id": {"$in": ids}}, projection or USER_PUBLIC_FIELDS
    )
    return {user["_id"]: user for user in cursor}


def populate_users(docs: List[dict], field: str, projection: Optional[dict] = None) -> List[dict]:
    """Replace docs[i][field] (a user ObjectId) with the user summary, in place."""
    users = get_users_by_ids((doc.get(field) for doc in docs), projection)
    for doc in docs:
        ref = doc.get(field)
        if ref is not None:
            doc[field] = users.get(ref)
    return docs


def user_summary(user: dict) -> dict:
    """Shape returned by the auth endpoints."""
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "phone": user.get("phone"),
        "role": user.get("role"),
        "state": user.get("state"),
        "tier": user.get("tier", "FREE"),
    }
