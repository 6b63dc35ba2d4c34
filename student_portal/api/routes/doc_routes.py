"""
Document Routes - approval workflow

POST /docs/upload - Upload a document as PENDING (SUPPORT, ADMIN, SUPER_ADMIN)
GET /docs/pending - Pending documents (SUPER_ADMIN)
PATCH /docs/{id}/approve - Approve a pending document (SUPER_ADMIN)
PATCH /docs/{id}/reject - Reject a pending document (SUPER_ADMIN)
GET /docs/list - Approved documents for the caller's state (any user)
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, File, Form, Request, UploadFile

from student_portal.core.auth import get_current_user, get_current_super_admin, require_roles
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import DocType, StateCode
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import serialize_doc, serialize_docs, populate_users
from student_portal.services.workflow import document_transition
from student_portal.utils.common import parse_object_id, utcnow
from student_portal.utils.file_upload import save_upload

router = APIRouter(prefix="/docs", tags=["Documents"])


def _review(request: Request, doc_id: str, reviewer: dict, target: str) -> dict:
    collection = get_collection(COLLECTIONS["documents"])
    doc = collection.find_one({"_id": parse_object_id(doc_id, "document id")})
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    document_transition(doc["status"], target)

    updates = {"status": target, "updated_at": utcnow()}
    if target == "APPROVED":
        updates["approved_by"] = reviewer["_id"]
    else:
        updates["rejected_by"] = reviewer["_id"]
    collection.update_one({"_id": doc["_id"]}, {"$set": updates})
    doc.update(updates)

    verb = "approved" if target == "APPROVED" else "rejected"
    log_activity(
        request, reviewer, "DOCUMENT_APPROVE" if target == "APPROVED" else "DOCUMENT_REJECT",
        "DOCUMENT", doc["_id"],
        f"{reviewer.get('name')} {verb} document: {doc['title']}",
        {"doc_type": doc["doc_type"], "state": doc["state"], "uploaded_by": str(doc["uploaded_by"])}
    )
    return {"success": True, "data": serialize_doc(doc)}


@router.post("/upload", status_code=201)
async def upload_document(
    request: Request,
    title: str = Form(..., min_length=1),
    doc_type: DocType = Form(...),
    state: StateCode = Form(...),
    file_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    user: dict = Depends(require_roles("SUPPORT", "ADMIN", "SUPER_ADMIN"))
):
    """Store a document for super admin review. Send either file_url or a file."""
    if file_url and file_url.strip():
        url = file_url.strip()
    elif file is not None:
        url = await save_upload(file)
    else:
        raise HTTPException(status_code=400, detail="Provide either a file upload or file_url")

    now = utcnow()
    doc = {
        "title": title.strip(),
        "file_url": url,
        "doc_type": doc_type.value,
        "state": state.value,
        "status": "PENDING",
        "uploaded_by": user["_id"],
        "approved_by": None,
        "created_at": now,
        "updated_at": now,
    }
    doc["_id"] = get_collection(COLLECTIONS["documents"]).insert_one(doc).inserted_id

    log_activity(
        request, user, "DOCUMENT_UPLOAD", "DOCUMENT", doc["_id"],
        f"{user.get('name')} uploaded document: {doc['title']}",
        {"doc_type": doc["doc_type"], "state": doc["state"], "status": "PENDING"}
    )
    return {"success": True, "data": serialize_doc(doc)}


@router.get("/pending")
async def get_pending_documents(user: dict = Depends(get_current_super_admin)):
    docs = list(get_collection(COLLECTIONS["documents"]).find({"status": "PENDING"}).sort([("created_at", -1), ("_id", -1)]))
    populate_users(docs, "uploaded_by", {"name": 1, "phone": 1})
    return {"success": True, "count": len(docs), "data": serialize_docs(docs)}


@router.patch("/{doc_id}/approve")
async def approve_document(doc_id: str, request: Request, user: dict = Depends(get_current_super_admin)):
    return _review(request, doc_id, user, "APPROVED")


@router.patch("/{doc_id}/reject")
async def reject_document(doc_id: str, request: Request, user: dict = Depends(get_current_super_admin)):
    return _review(request, doc_id, user, "REJECTED")


@router.get("/list")
async def list_approved_documents(request: Request, user: dict = Depends(get_current_user)):
    """Only APPROVED documents for the caller's own state."""
    docs = list(get_collection(COLLECTIONS["documents"]).find(
        {"state": user.get("state"), "status": "APPROVED"},
        {"title": 1, "file_url": 1, "doc_type": 1, "state": 1, "created_at": 1}
    ).sort([("created_at", -1), ("_id", -1)]))

    log_activity(
        request, user, "DOCUMENT_VIEW", "DOCUMENT", None,
        f"{user.get('name')} viewed approved documents",
        {"state": user.get("state"), "count": len(docs)}
    )
    return {"success": True, "count": len(docs), "data": serialize_docs(docs)}
