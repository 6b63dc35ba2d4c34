"""
Ticket Routes - support workflow

POST /tickets - Create a ticket (USER)
GET /tickets - USER: own tickets, SUPPORT: actionable tickets
GET /tickets/support - Actionable tickets (SUPPORT)
GET /tickets/super-admin - Completed tickets (SUPER_ADMIN)
PATCH /tickets/{id}/assign - Take a ticket (SUPPORT)
PATCH /tickets/{id}/complete - Close a ticket (SUPPORT)
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request

from student_portal.core.auth import get_current_user, get_current_super_admin, get_current_support, require_roles
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import TicketComplete, TicketCreate
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import serialize_doc, serialize_docs, populate_users
from student_portal.services.workflow import ticket_transition
from student_portal.utils.common import parse_object_id, utcnow

router = APIRouter(prefix="/tickets", tags=["Tickets"])

ACTIONABLE = {"status": {"$in": ["OPEN", "IN_PROGRESS"]}}
CREATOR_FIELDS = {"name": 1, "phone": 1, "state": 1}
STAFF_FIELDS = {"name": 1, "phone": 1}


def _get_ticket_or_404(ticket_id: str) -> dict:
    ticket = get_collection(COLLECTIONS["tickets"]).find_one({"_id": parse_object_id(ticket_id, "ticket id")})
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


def _list(query: dict) -> dict:
    tickets = list(get_collection(COLLECTIONS["tickets"]).find(query).sort([("created_at", -1), ("_id", -1)]))
    populate_users(tickets, "created_by", CREATOR_FIELDS)
    return {"success": True, "count": len(tickets), "data": serialize_docs(tickets)}


@router.post("", status_code=201)
async def create_ticket(body: TicketCreate, request: Request, user: dict = Depends(require_roles("USER"))):
    now = utcnow()
    ticket = {
        "title": body.title,
        "description": body.description,
        "state": user.get("state"),
        "created_by": user["_id"],
        "assigned_to": None,
        "status": "OPEN",
        "completed_by": None,
        "completed_at": None,
        "resolution_note": "",
        "created_at": now,
        "updated_at": now,
    }
    ticket["_id"] = get_collection(COLLECTIONS["tickets"]).insert_one(ticket).inserted_id

    log_activity(
        request, user, "TICKET_CREATE", "TICKET", ticket["_id"],
        f"{user.get('name')} created ticket: {ticket['title']}",
        {"state": ticket["state"], "status": "OPEN"}
    )
    return {"success": True, "data": serialize_doc(ticket)}


@router.get("")
async def list_tickets(user: dict = Depends(get_current_user)):
    """USER sees own tickets (any status); SUPPORT sees OPEN / IN_PROGRESS."""
    role = user.get("role")
    if role == "USER":
        return _list({"created_by": user["_id"]})
    if role == "SUPPORT":
        return _list(ACTIONABLE)
    raise HTTPException(status_code=403, detail=f"Role {role} is not allowed to view tickets")


@router.get("/support")
async def list_support_tickets(user: dict = Depends(get_current_support)):
    return _list(ACTIONABLE)


@router.get("/super-admin")
async def list_completed_tickets(user: dict = Depends(get_current_super_admin)):
    """Completed tickets, most recently completed first."""
    tickets = list(
        get_collection(COLLECTIONS["tickets"]).find({"status": "COMPLETED"}).sort("completed_at", -1)
    )
    populate_users(tickets, "created_by", CREATOR_FIELDS)
    populate_users(tickets, "assigned_to", STAFF_FIELDS)
    populate_users(tickets, "completed_by", STAFF_FIELDS)
    return {"success": True, "count": len(tickets), "data": serialize_docs(tickets)}


@router.patch("/{ticket_id}/assign")
async def assign_ticket(ticket_id: str, request: Request, user: dict = Depends(get_current_support)):
    ticket = _get_ticket_or_404(ticket_id)
    ticket_transition(ticket["status"], "IN_PROGRESS")

    updates = {"assigned_to": user["_id"], "status": "IN_PROGRESS", "updated_at": utcnow()}
    get_collection(COLLECTIONS["tickets"]).update_one({"_id": ticket["_id"]}, {"$set": updates})
    ticket.update(updates)

    log_activity(
        request, user, "TICKET_ASSIGN", "TICKET", ticket["_id"],
        f"{user.get('name')} assigned ticket: {ticket['title']}",
        {"status": "IN_PROGRESS", "assigned_to": str(user["_id"])}
    )
    return {"success": True, "data": serialize_doc(ticket)}


@router.patch("/{ticket_id}/complete")
async def complete_ticket(
    ticket_id: str,
    request: Request,
    body: Optional[TicketComplete] = None,
    user: dict = Depends(get_current_support)
):
    ticket = _get_ticket_or_404(ticket_id)
    ticket_transition(ticket["status"], "COMPLETED")

    now = utcnow()
    updates = {
        "status": "COMPLETED",
        "completed_by": user["_id"],
        "completed_at": now,
        "resolution_note": (body.resolution_note if body else None) or ticket.get("resolution_note") or "",
        "updated_at": now,
    }
    get_collection(COLLECTIONS["tickets"]).update_one({"_id": ticket["_id"]}, {"$set": updates})
    ticket.update(updates)

    log_activity(
        request, user, "TICKET_COMPLETE", "TICKET", ticket["_id"],
        f"{user.get('name')} completed ticket: {ticket['title']}",
        {"status": "COMPLETED", "created_by": str(ticket["created_by"]), "resolution_note": updates["resolution_note"]}
    )

    populate_users([ticket], "created_by", STAFF_FIELDS)
    populate_users([ticket], "completed_by", STAFF_FIELDS)
    return {"success": True, "data": serialize_doc(ticket)}
