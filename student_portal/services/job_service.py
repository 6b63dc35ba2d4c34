"""
Job Posting Service - validation and persistence rules for admin job postings.

Government postings carry govt_job_fields, private postings carry private_job_fields.
Each category has its own set of mandatory fields, checked on create and update.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException

from student_portal.utils.common import utcnow

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = (
    "job_title", "organization", "job_type", "job_description", "target_qualifications",
    "qualifications", "experience", "skills_required", "preferred_skills", "age_limit",
    "category_eligibility", "total_positions", "last_application_date",
    "govt_job_fields", "private_job_fields", "status", "featured", "tags",
)

# Shallow-merged on update instead of replaced
MERGED_GROUPS = ("govt_job_fields", "private_job_fields")


def _has_range(value: Optional[dict]) -> bool:
    return bool(value) and value.get("min") is not None and value.get("max") is not None


def missing_govt_fields(fields: Optional[dict]) -> List[str]:
    fields = fields or {}
    missing = [
        name for name in ("notifying_authority", "post_code", "grade", "exam_date", "official_link")
        if not fields.get(name)
    ]
    if not _has_range(fields.get("pay_scale")):
        missing.insert(3, "pay_scale.min/max")
    return missing


def missing_private_fields(fields: Optional[dict]) -> List[str]:
    fields = fields or {}
    missing = []
    if not fields.get("work_mode"):
        missing.append("work_mode")
    if not fields.get("job_location"):
        missing.append("job_location")
    if not _has_range(fields.get("salary_range")):
        missing.append("salary_range.min/max")
    for name in ("hr_contact_email", "hr_contact_phone"):
        if not fields.get(name):
            missing.append(name)
    return missing


def validate_category_fields(job: dict) -> None:
    """Raise 400 when the category-specific block is absent or incomplete."""
    category = job.get("job_category")
    if category == "Government":
        if not job.get("govt_job_fields"):
            raise HTTPException(status_code=400, detail="Government job fields are required")
        missing = missing_govt_fields(job["govt_job_fields"])
        if missing:
            raise HTTPException(status_code=400, detail=f"Missing government job fields: {', '.join(missing)}")
    elif category == "Private":
        if not job.get("private_job_fields"):
            raise HTTPException(status_code=400, detail="Private job fields are required")
        missing = missing_private_fields(job["private_job_fields"])
        if missing:
            raise HTTPException(status_code=400, detail=f"Missing private job fields: {', '.join(missing)}")


def validate_future_date(value) -> None:
    if value <= utcnow():
        raise HTTPException(status_code=400, detail="Last application date must be in the future")


def apply_job_update(job: dict, changes: dict) -> dict:
    """
    Compute the $set document for an update and apply it to `job` in place.

    Only ALLOWED_UPDATES are considered; field groups are shallow-merged.
    """
    updates = {}
    for field in ALLOWED_UPDATES:
        if field not in changes or changes[field] is None:
            continue
        value = changes[field]
        if field in MERGED_GROUPS:
            merged = dict(job.get(field) or {})
            merged.update({k: v for k, v in value.items() if v is not None})
            value = merged
        updates[field] = value

    job.update(updates)
    return updates


def should_notify(job: dict) -> bool:
    """Active jobs that have never been fanned out."""
    tracking = job.get("notification_tracking") or {}
    return job.get("status") == "Active" and not tracking.get("notification_sent")


def empty_tracking() -> dict:
    return {
        "notification_sent": False,
        "notification_sent_to": [],
        "notification_sent_date": None,
        "total_students_matched": 0,
    }
