"""
Chat Routes - three role-scoped channels

POST/GET /chats/user-support/{ticket_id} - Ticket thread (USER owner, SUPPORT, ADMIN, SUPER_ADMIN)
POST/GET /chats/support-admin - SUPPORT, ADMIN, SUPER_ADMIN
POST/GET /chats/admin-super-admin - ADMIN, SUPER_ADMIN
"""

from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, HTTPException, Depends

from student_portal.core.auth import require_roles
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import ChatMessageCreate
from student_portal.services.mongo_service import serialize_doc, serialize_docs, populate_users
from student_portal.utils.common import parse_object_id, utcnow

router = APIRouter(prefix="/chats", tags=["Chat"])

ticket_chat_access = require_roles("USER", "SUPPORT", "ADMIN", "SUPER_ADMIN")
support_admin_access = require_roles("SUPPORT", "ADMIN", "SUPER_ADMIN")
admin_super_admin_access = require_roles("ADMIN", "SUPER_ADMIN")


def _assert_ticket_access(user: dict, ticket_id: str) -> dict:
    ticket = get_collection(COLLECTIONS["tickets"]).find_one({"_id": parse_object_id(ticket_id, "ticket id")})
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if user["role"] == "USER" and ticket["created_by"] != user["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized for this ticket")
    return ticket


def _post(conversation_type: str, user: dict, body: ChatMessageCreate, ticket: Optional[ObjectId] = None) -> dict:
    text = (body.message or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="message is required")

    message = {
        "conversation_type": conversation_type,
        "ticket": ticket,
        "from": user["_id"],
        "from_role": user["role"],
        "message": text,
        "attachments": [a.model_dump() for a in body.attachments],
        "created_at": utcnow(),
    }
    message["_id"] = get_collection(COLLECTIONS["chat_messages"]).insert_one(message).inserted_id
    return {"success": True, "data": serialize_doc(message)}


def _history(conversation_type: str, ticket: Optional[ObjectId] = None) -> dict:
    query = {"conversation_type": conversation_type}
    if ticket is not None:
        query["ticket"] = ticket
    messages = list(
        get_collection(COLLECTIONS["chat_messages"]).find(query).sort([("created_at", 1), ("_id", 1)])
    )
    populate_users(messages, "from", {"name": 1, "role": 1})
    return {"success": True, "count": len(messages), "data": serialize_docs(messages)}


@router.post("/user-support/{ticket_id}", status_code=201)
async def send_user_support_message(ticket_id: str, body: ChatMessageCreate, user: dict = Depends(ticket_chat_access)):
    if not (body.message or "").strip():
        raise HTTPException(status_code=400, detail="message is required")
    ticket = _assert_ticket_access(user, ticket_id)
    return _post("USER_SUPPORT", user, body, ticket["_id"])


@router.get("/user-support/{ticket_id}")
async def get_user_support_messages(ticket_id: str, user: dict = Depends(ticket_chat_access)):
    ticket = _assert_ticket_access(user, ticket_id)
    return _history("USER_SUPPORT", ticket["_id"])


@router.post("/support-admin", status_code=201)
async def send_support_admin_message(body: ChatMessageCreate, user: dict = Depends(support_admin_access)):
    return _post("SUPPORT_ADMIN", user, body)


@router.get("/support-admin")
async def get_support_admin_messages(user: dict = Depends(support_admin_access)):
    return _history("SUPPORT_ADMIN")


@router.post("/admin-super-admin", status_code=201)
async def send_admin_super_admin_message(body: ChatMessageCreate, user: dict = Depends(admin_super_admin_access)):
    return _post("ADMIN_SUPER_ADMIN", user, body)


@router.get("/admin-super-admin")
async def get_admin_super_admin_messages(user: dict = Depends(admin_super_admin_access)):
    return _history("ADMIN_SUPER_ADMIN")
