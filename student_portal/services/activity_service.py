"""
Activity Service - audit trail for the super admin dashboard.

log_activity never raises; a failed write is logged and the request carries on.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request

from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.utils.common import utcnow

logger = logging.getLogger(__name__)


def _client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def log_activity(
    request: Optional[Request],
    user: Optional[dict],
    action: str,
    resource_type: str,
    resource_id: Any = None,
    description: str = "",
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """Record who did what. Skipped when there is no user."""
    if not user:
        return

    try:
        get_collection(COLLECTIONS["activities"]).insert_one({
            "user_id": user["_id"],
            "user_role": user.get("role"),
            "user_name": user.get("name"),
            "action": action,
            "resource_type": resource_type,
            "resource_id": str(resource_id) if resource_id is not None else None,
            "description": description,
            "metadata": metadata or {},
            "ip_address": _client_ip(request),
            "user_agent": request.headers.get("user-agent") if request is not None else None,
            "created_at": utcnow(),
        })
    except Exception as e:
        logger.error("Failed to log activity %s for user %s: %s", action, user.get("_id"), e)
