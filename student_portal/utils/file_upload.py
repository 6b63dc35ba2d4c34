"""
File Upload Utility - store approval-workflow documents.

Supported formats:
- PDF (.pdf)
- Images (.jpg, .jpeg, .png)
- Word (.doc, .docx)

Files are written under settings.upload_dir and served from settings.upload_base_url.
"""

import logging
import os
import uuid

from fastapi import UploadFile, HTTPException

from student_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png', '.doc', '.docx'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def save_upload(file: UploadFile) -> str:
    """
    Validate and persist an uploaded document.

    Returns:
        Public URL of the stored file

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Allowed: pdf, jpg, png, doc, docx"
        )

    content = await file.read()

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_mb}MB"
        )

    stored_name = f"{uuid.uuid4().hex}{ext}"
    os.makedirs(settings.upload_dir, exist_ok=True)
    with open(os.path.join(settings.upload_dir, stored_name), "wb") as fh:
        fh.write(content)

    logger.info("Stored upload %s as %s (%d bytes)", file.filename, stored_name, len(content))
    return f"{settings.upload_base_url.rstrip('/')}/{stored_name}"
