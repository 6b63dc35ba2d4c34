"""
User Service - account creation and the records that hang off it.

Registration writes the user first; the company profile, Student record and
UserProfile are follow-ups whose failures are logged, not raised.
"""

import logging

from pymongo import ReturnDocument
from pymongo.collection import Collection

from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.utils.common import generate_public_id, utcnow

logger = logging.getLogger(__name__)


def new_company_doc(user: dict, company_name: str = None) -> dict:
    now = utcnow()
    return {
        "user_id": user["_id"],
        "company_name": company_name or user.get("name"),
        "email": user.get("email"),
        "phone_number": user.get("phone"),
        "verification_status": "pending",
        "verified_by": None,
        "verified_at": None,
        "verification_note": None,
        "created_at": now,
        "updated_at": now,
    }


class UserService:
    """Creates users and their satellite records."""

    def __init__(self):
        self.users: Collection = get_collection(COLLECTIONS["users"])
        self.companies: Collection = get_collection(COLLECTIONS["companies"])
        self.students: Collection = get_collection(COLLECTIONS["students"])
        self.profiles: Collection = get_collection(COLLECTIONS["user_profiles"])

    def email_taken(self, email: str) -> bool:
        return bool(email) and self.users.count_documents({"email": email}, limit=1) > 0

    def phone_taken(self, phone: str) -> bool:
        return self.users.count_documents({"phone": phone}, limit=1) > 0

    def create_user(self, data: dict) -> dict:
        now = utcnow()
        user = {
            "name": data["name"],
            "phone": data["phone"],
            "state": data["state"],
            "role": data["role"],
            "tier": "FREE",
            "plan": {"name": "FREE", "is_paid": False, "started_at": None, "expires_at": None},
            "has_paid_plan": False,
            "is_paid": False,
            "profile_image": None,
            "created_at": now,
            "updated_at": now,
        }
        if data.get("email"):
            user["email"] = data["email"]
        if data.get("password"):
            user["password"] = data["password"]
        user["_id"] = self.users.insert_one(user).inserted_id
        return user

    def create_company_profile(self, user: dict, company_name: str) -> None:
        try:
            self.companies.insert_one(new_company_doc(user, company_name))
        except Exception as e:
            logger.error("Company profile creation failed for user %s: %s", user["_id"], e)

    def create_student_record(self, user: dict, qualification: str) -> None:
        now = utcnow()
        try:
            self.students.insert_one({
                "student_id": generate_public_id("STU"),
                "name": user["name"],
                "email": user["email"].lower(),
                "phone": user["phone"],
                "qualification": qualification,
                "job_alerts": {"enabled": True},
                "status": "Active",
                "created_at": now,
                "updated_at": now,
            })
        except Exception as e:
            logger.error("Student record creation failed for %s: %s", user.get("email"), e)

    def upsert_user_profile(self, user: dict) -> None:
        email = user["email"].lower()
        now = utcnow()
        try:
            self.profiles.find_one_and_update(
                {"email": email},
                {
                    "$set": {
                        "full_name": user["name"],
                        "email": email,
                        "mobile_number": user["phone"],
                        "is_mobile_verified": False,
                        "updated_at": now,
                    },
                    "$setOnInsert": {"created_at": now, "bio": "", "skills": []},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error("User profile upsert failed for %s: %s", email, e)


def get_user_service() -> UserService:
    return UserService()
