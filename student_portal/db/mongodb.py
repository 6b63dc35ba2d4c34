"""
MongoDB Connection Utility

MongoDB stores every entity of the platform:
- users, students, user_profiles, companies
- job_postings and the notifications fanned out from them
- documents (approval workflow), tickets and chat messages
- posts, post_comments, follows
- colleges (rank predictor) and the activity log
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from student_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS map for names."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "students": "students",
    "user_profiles": "user_profiles",
    "companies": "companies",
    "jobs": "job_postings",
    "notifications": "notifications",
    "documents": "documents",
    "tickets": "tickets",
    "chat_messages": "chat_messages",
    "posts": "posts",
    "post_comments": "post_comments",
    "follows": "follows",
    "colleges": "colleges",
    "activities": "activities",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Users: phone login, sparse unique email
    db[COLLECTIONS["users"]].create_index("phone", unique=True)
    db[COLLECTIONS["users"]].create_index("email", unique=True, sparse=True)
    db[COLLECTIONS["users"]].create_index([("state", ASCENDING), ("role", ASCENDING)])

    # Students: fan-out query filters on qualification + status
    db[COLLECTIONS["students"]].create_index("student_id", unique=True)
    db[COLLECTIONS["students"]].create_index("email", unique=True)
    db[COLLECTIONS["students"]].create_index([("qualification", ASCENDING), ("status", ASCENDING)])

    db[COLLECTIONS["user_profiles"]].create_index("email", unique=True)
    db[COLLECTIONS["companies"]].create_index("user_id")
    db[COLLECTIONS["companies"]].create_index("verification_status")

    # Job postings
    db[COLLECTIONS["jobs"]].create_index("job_id", unique=True)
    db[COLLECTIONS["jobs"]].create_index("target_qualifications")
    db[COLLECTIONS["jobs"]].create_index([("job_category", ASCENDING), ("status", ASCENDING)])
    db[COLLECTIONS["jobs"]].create_index([("created_at", DESCENDING)])

    # Notifications
    db[COLLECTIONS["notifications"]].create_index("notification_id", unique=True)
    db[COLLECTIONS["notifications"]].create_index([("student_id", ASCENDING), ("is_read", ASCENDING)])
    db[COLLECTIONS["notifications"]].create_index("job_id")

    # Approval workflow: pending list + approved-by-state list
    db[COLLECTIONS["documents"]].create_index([("state", ASCENDING), ("status", ASCENDING)])
    db[COLLECTIONS["documents"]].create_index("uploaded_by")

    db[COLLECTIONS["tickets"]].create_index("status")
    db[COLLECTIONS["tickets"]].create_index("created_by")
    db[COLLECTIONS["tickets"]].create_index([("status", ASCENDING), ("completed_at", DESCENDING)])

    db[COLLECTIONS["chat_messages"]].create_index([
        ("conversation_type", ASCENDING),
        ("ticket", ASCENDING),
        ("created_at", ASCENDING)
    ])

    db[COLLECTIONS["posts"]].create_index([("created_at", DESCENDING)])
    db[COLLECTIONS["posts"]].create_index("author")
    db[COLLECTIONS["post_comments"]].create_index([("post", ASCENDING), ("created_at", DESCENDING)])
    db[COLLECTIONS["follows"]].create_index([("follower", ASCENDING), ("following", ASCENDING)], unique=True)

    # Rank predictor: state + per-category cutoff
    for category in ("OC", "BC", "SC", "ST"):
        db[COLLECTIONS["colleges"]].create_index([(f"cutoff_ranks.{category}", ASCENDING), ("state", ASCENDING)])
    db[COLLECTIONS["colleges"]].create_index([("district", ASCENDING), ("state", ASCENDING)])

    db[COLLECTIONS["activities"]].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    db[COLLECTIONS["activities"]].create_index([("action", ASCENDING), ("created_at", DESCENDING)])

    logger.info("MongoDB indexes created successfully")
