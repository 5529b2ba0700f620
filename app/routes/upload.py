import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..auth import get_current_user
from ..models import Profile
from ..utils.document_storage import (
    MAX_DOCUMENT_SIZE_BYTES,
    StorageError,
    build_document_key,
    generate_presigned_url,
    key_belongs_to,
    upload_document,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])

ALLOWED_DOCUMENT_TYPES = {
    "application/pdf",
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@router.post("/certificate")
async def upload_certificate(
    file: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
):
    """Upload a CPD certificate or supervision document to R2 (private)"""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    if file.content_type and file.content_type not in ALLOWED_DOCUMENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only PDF, Word documents and images are allowed.",
        )

    contents = await file.read()
    if len(contents) > MAX_DOCUMENT_SIZE_BYTES:
        raise HTTPException(status_code=400, detail="File too large. Maximum size is 10MB.")

    key = build_document_key(current_user.user_id, file.filename)
    logger.info(f"📤 Uploading certificate for user {current_user.user_id}: {key}")

    try:
        upload_document(contents, key, file.content_type)
        url = generate_presigned_url(key)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return {"key": key, "file_name": file.filename, "size": len(contents), "url": url}


@router.get("/presigned")
async def get_presigned_url(
    key: str = Query(..., min_length=1),
    current_user: Profile = Depends(get_current_user),
):
    if not key_belongs_to(key, current_user.user_id):
        logger.warning(f"🚫 User {current_user.user_id} requested a foreign document key")
        raise HTTPException(status_code=403, detail="Access denied")

    try:
        return {"url": generate_presigned_url(key)}
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
