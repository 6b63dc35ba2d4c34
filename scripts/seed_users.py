#!/usr/bin/env python3
"""
Seed staff accounts (SUPPORT, ADMIN, SUPER_ADMIN).

Staff roles cannot self-register, so they are created here.
Existing accounts (matched by email or phone) are updated in place.

Run: python scripts/seed_users.py
Passwords come from SEED_STAFF_PASSWORD (default shown below, change it).
"""
import logging
import os

from student_portal.core.auth import hash_password
from student_portal.db.mongodb import get_collection, init_mongo_indexes, test_mongo_connection, COLLECTIONS
from student_portal.utils.common import utcnow

logger = logging.getLogger("seed_users")

STAFF = [
    {"name": "Support User", "email": "support@studentportal.local", "phone": "9000000001", "role": "SUPPORT"},
    {"name": "Admin User", "email": "admin@studentportal.local", "phone": "9000000002", "role": "ADMIN"},
    {"name": "Super Admin", "email": "superadmin@studentportal.local", "phone": "9000000003", "role": "SUPER_ADMIN"},
]


def seed_users(password: str) -> None:
    users = get_collection(COLLECTIONS["users"])
    hashed = hash_password(password)

    for staff in STAFF:
        now = utcnow()
        fields = {**staff, "password": hashed, "state": "AP", "updated_at": now}
        existing = users.find_one({"$or": [{"email": staff["email"]}, {"phone": staff["phone"]}]})

        if existing:
            users.update_one({"_id": existing["_id"]}, {"$set": fields})
            logger.info("Updated: %s (%s)", staff["email"], staff["role"])
        else:
            users.insert_one({
                **fields,
                "tier": "FREE",
                "plan": {"name": "FREE", "is_paid": False, "started_at": None, "expires_at": None},
                "has_paid_plan": False,
                "is_paid": False,
                "created_at": now,
            })
            logger.info("Created: %s (%s)", staff["email"], staff["role"])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    if not test_mongo_connection():
        raise SystemExit("MongoDB is not reachable")

    init_mongo_indexes()
    seed_users(os.environ.get("SEED_STAFF_PASSWORD", "change-me-123"))
    logger.info("Seed completed")
