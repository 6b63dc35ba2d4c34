"""
Payment Routes

POST /payments/verify - Razorpay webhook: verify signature, upgrade user tier
"""

import json
import logging

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, Request

from student_portal.core.config import get_settings
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.services.payment_service import tier_for_amount, tier_update, verify_signature
from student_portal.services.activity_service import log_activity

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/verify")
async def verify_payment_webhook(request: Request):
    """
    Gateway webhook (no auth). The signature is an HMAC-SHA256 of the raw body.

    Only payment.captured events change anything.
    """
    secret = settings.razorpay_webhook_secret
    if not secret:
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    raw_body = await request.body()
    if not verify_signature(secret, raw_body, request.headers.get("x-razorpay-signature")):
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    try:
        event = json.loads(raw_body or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    if event.get("event") != "payment.captured":
        return {"success": True, "message": "Event ignored"}

    payload = event.get("payload") or {}
    entity = (payload.get("payment") or {}).get("entity") or payload.get("entity") or {}
    amount = (entity.get("amount") or 0) / 100
    notes = entity.get("notes") or {}
    user_id = notes.get("user_id") or notes.get("userId")

    if not user_id:
        return {"success": True, "message": "No user_id in notes"}

    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return {"success": True, "message": "User not found"}

    users = get_collection(COLLECTIONS["users"])
    user = users.find_one({"_id": oid})
    if not user:
        return {"success": True, "message": "User not found"}

    tier = tier_for_amount(amount)
    if tier:
        users.update_one({"_id": oid}, {"$set": tier_update(tier)})
    else:
        tier = user.get("tier", "FREE")
    logger.info("Payment %s captured for user %s: %.2f -> %s", entity.get("id"), user_id, amount, tier)

    log_activity(
        request, user, "PAYMENT_VERIFY", "PAYMENT", user["_id"],
        f"Payment verified: Rs.{amount}, tier updated to {tier}",
        {"amount": amount, "tier": tier, "payment_id": entity.get("id")}
    )
    return {"success": True, "message": "Tier updated", "tier": tier}
