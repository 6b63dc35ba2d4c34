"""
Shared helpers: time handling, public ids, ObjectId parsing, pagination.
"""

import math
import random
import string
import time
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException

_ID_ALPHABET = string.ascii_lowercase + string.digits


def utcnow() -> datetime:
    """Naive UTC timestamp (what pymongo hands back by default)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert aware datetimes to naive UTC so they compare with stored values."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_long_date(value: datetime) -> str:
    """Render as '15 March 2030'."""
    return f"{value.day} {value.strftime('%B %Y')}"


def generate_public_id(prefix: str) -> str:
    """Human readable id like JOB-1718000000000-k3j9x0a1b."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def parse_object_id(value: str, name: str = "id") -> ObjectId:
    """Parse a path parameter into an ObjectId or fail with 400."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) or 1
