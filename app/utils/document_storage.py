"""
Supporting document storage (CPD certificates, mentoring/supervision evidence) in R2.
Objects are private; reads go through short-lived presigned URLs.
"""

import logging
from datetime import datetime
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from ..config import R2_ACCESS_KEY_ID, R2_ACCOUNT_ID, R2_BUCKET_NAME, R2_SECRET_ACCESS_KEY
from .sanitization import sanitize_storage_filename

logger = logging.getLogger(__name__)

MAX_DOCUMENT_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
PRESIGNED_URL_EXPIRATION = 3600


class StorageError(Exception):
    pass


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def build_document_key(user_id: str, filename: str, now: Optional[datetime] = None) -> str:
    """Format: {user_id}/{unix_ms}_{sanitized filename}"""
    now = now or datetime.utcnow()
    timestamp = int(now.timestamp() * 1000)
    return f"{user_id}/{timestamp}_{sanitize_storage_filename(filename)}"


def key_belongs_to(key: str, user_id: str) -> bool:
    return key.startswith(f"{user_id}/") and ".." not in key


def upload_document(content: bytes, key: str, content_type: Optional[str]) -> None:
    try:
        get_r2_client().put_object(
            Bucket=R2_BUCKET_NAME,
            Key=key,
            Body=content,
            ContentType=content_type or "application/octet-stream",
        )
    except ClientError as e:
        logger.error(f"❌ Failed to upload document {key}: {e}")
        raise StorageError("Failed to upload file") from e
    logger.info(f"✅ Uploaded document {key} ({len(content)} bytes)")


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
    try:
        return get_r2_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": R2_BUCKET_NAME, "Key": key},
            ExpiresIn=expiration,
        )
    except ClientError as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        raise StorageError("Failed to generate download link") from e
