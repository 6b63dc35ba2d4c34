"""
Payment Service - Razorpay webhook verification and tier mapping.
"""

import hashlib
import hmac
from typing import Optional

from student_portal.utils.common import utcnow

PAID_TIERS = ("1_RUPEE", "9_RUPEE")


def compute_signature(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(secret, body), signature)


def tier_for_amount(amount: float) -> Optional[str]:
    """Rupee amount -> tier; None when it does not buy anything."""
    if amount >= 9:
        return "9_RUPEE"
    if amount >= 1:
        return "1_RUPEE"
    return None


def tier_update(tier: str) -> dict:
    """$set document for a user that just paid for `tier`."""
    return {
        "tier": tier,
        "plan.name": tier,
        "plan.is_paid": True,
        "plan.started_at": utcnow(),
        "has_paid_plan": True,
        "is_paid": True,
        "updated_at": utcnow(),
    }
