"""
Company Routes - recruiter profiles and verification

GET /companies/search - Search companies (ADMIN, SUPER_ADMIN)
GET /companies/me - Own company profile, created on first access (COMPANY)
PUT /companies/me - Update own company profile (COMPANY)
POST /companies/{company_id}/verify - Set verification status (SUPER_ADMIN)
"""

import re
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from student_portal.core.auth import get_current_admin, get_current_company, get_current_super_admin
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import CompanyUpdate, CompanyVerifyRequest
from student_portal.services.mongo_service import serialize_doc
from student_portal.services.user_service import new_company_doc
from student_portal.services.workflow import COMPANY_STATUSES, company_status_after_edit, company_transition
from student_portal.utils.common import parse_object_id, total_pages, utcnow

router = APIRouter(prefix="/companies", tags=["Companies"])


def _contains(value: str) -> dict:
    return {"$regex": re.escape(value), "$options": "i"}


def _get_or_create_company(user: dict) -> dict:
    collection = get_collection(COLLECTIONS["companies"])
    company = collection.find_one({"user_id": user["_id"]})
    if not company:
        company = new_company_doc(user)
        company["account_type"] = "company"
        company["_id"] = collection.insert_one(company).inserted_id
    return company


def _company_summary(company: dict) -> dict:
    return {
        "company_id": company["_id"],
        "company_name": company.get("company_name"),
        "email": company.get("email"),
        "phone_number": company.get("phone_number"),
        "industry": company.get("industry"),
        "company_size": company.get("company_size"),
        "website": company.get("website"),
        "verification_status": company.get("verification_status"),
        "verified_by": company.get("verified_by"),
        "verified_at": company.get("verified_at"),
        "created_at": company.get("created_at"),
    }


@router.get("/search")
async def search_companies(
    q: Optional[str] = Query(None),
    industry: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    verification_status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    admin: dict = Depends(get_current_admin)
):
    """Search by text, industry, headquarters location and verification status."""
    clauses = []
    if industry:
        clauses.append({"industry": industry})
    if location:
        clauses.append({"$or": [
            {"headquarters.city": _contains(location)},
            {"headquarters.state": _contains(location)},
            {"headquarters.country": _contains(location)},
        ]})
    if verification_status:
        status = verification_status.strip().lower()
        if status not in COMPANY_STATUSES:
            raise HTTPException(status_code=400, detail="verification_status must be one of PENDING, VERIFIED, REJECTED")
        clauses.append({"verification_status": status})
    if q:
        clauses.append({"$or": [
            {"company_name": _contains(q)},
            {"about": _contains(q)},
            {"products": _contains(q)},
            {"tagline": _contains(q)},
        ]})
    query = {"$and": clauses} if clauses else {}

    collection = get_collection(COLLECTIONS["companies"])
    total = collection.count_documents(query)
    companies = collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit)
    data = [serialize_doc(_company_summary(c)) for c in companies]

    return {
        "success": True,
        "page": page,
        "pages": total_pages(total, limit),
        "count": len(data),
        "total": total,
        "data": data,
    }


@router.get("/me")
async def get_my_company(user: dict = Depends(get_current_company)):
    return {"success": True, "data": serialize_doc(_get_or_create_company(user))}


@router.put("/me")
async def update_my_company(body: CompanyUpdate, user: dict = Depends(get_current_company)):
    """Update own profile. A verified company goes back to pending for re-approval."""
    company = _get_or_create_company(user)
    payload = body.model_dump(exclude_unset=True)

    was_verified = company.get("verification_status") == "verified"
    payload["verification_status"] = company_status_after_edit(company.get("verification_status"))
    if was_verified:
        payload["verified_by"] = None
        payload["verified_at"] = None
    payload["updated_at"] = utcnow()

    get_collection(COLLECTIONS["companies"]).update_one({"_id": company["_id"]}, {"$set": payload})
    company.update(payload)

    photo = (company.get("recruiter") or {}).get("photo")
    if photo:
        get_collection(COLLECTIONS["users"]).update_one(
            {"_id": user["_id"]}, {"$set": {"profile_image": photo.strip()}}
        )

    return {
        "success": True,
        "message": "Profile updated. Verification set to pending for re-approval."
        if was_verified else "Profile updated successfully.",
        "data": serialize_doc(company),
    }


@router.post("/{company_id}/verify")
async def verify_company(company_id: str, body: CompanyVerifyRequest, user: dict = Depends(get_current_super_admin)):
    """Approve, reject or reset a company's verification."""
    if not body.verification_status:
        raise HTTPException(status_code=400, detail="verification_status is required")

    collection = get_collection(COLLECTIONS["companies"])
    company = collection.find_one({"_id": parse_object_id(company_id, "company id")})
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    status = company_transition(company.get("verification_status"), body.verification_status)

    updates = {"verification_status": status, "updated_at": utcnow()}
    if status == "verified":
        updates["verified_by"] = user["_id"]
        updates["verified_at"] = utcnow()
    else:
        updates["verified_by"] = None
        updates["verified_at"] = None
    reason = (body.reason or "").strip()
    if reason:
        updates["verification_note"] = reason

    collection.update_one({"_id": company["_id"]}, {"$set": updates})
    company.update(updates)

    messages = {
        "verified": "Company approved successfully",
        "rejected": "Company rejected",
        "pending": "Company set to pending",
    }
    return {
        "success": True,
        "data": serialize_doc(company),
        "message": messages[status],
        "reason": reason or None,
    }
