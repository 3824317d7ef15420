"""
S3 client for the object store: uploaded source documents and generated card assets.
"""

import os
import re
import logging
import asyncio

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from utils.exceptions import StorageError

load_dotenv()

logger = logging.getLogger(__name__)

# Config from environment
S3_BUCKET = os.getenv("S3_BUCKET", "lessonloom-files")
S3_REGION = os.getenv("AWS_REGION", "eu-west-1")
S3_PREFIX = os.getenv("S3_PREFIX", "documents")

_s3_client = None


def _get_s3_client():
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client("s3", region_name=S3_REGION)
    return _s3_client


def sanitize_filename(filename: str) -> str:
    name = os.path.basename(filename or "").strip()
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    return name or "document"


def build_s3_key(file_id: str, filename: str) -> str:
    """Build a deterministic S3 key: documents/{file_id}/{filename}"""
    return f"{S3_PREFIX}/{file_id}/{sanitize_filename(filename)}"


def upload_bytes_to_s3(key: str, data: bytes, content_type: str = "application/octet-stream") -> bool:
    """Synchronous S3 upload. Returns True on success."""
    try:
        _get_s3_client().put_object(
            Bucket=S3_BUCKET,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
        logger.info(f"S3 upload success: {key} ({len(data)} bytes)")
        return True
    except ClientError as e:
        logger.error(f"S3 upload failed for {key}: {e}")
        return False
    except Exception as e:
        logger.error(f"S3 upload unexpected error for {key}: {e}")
        return False


def download_bytes_from_s3(key: str) -> bytes:
    """Synchronous S3 download. Raises StorageError if the object can't be read."""
    try:
        response = _get_s3_client().get_object(Bucket=S3_BUCKET, Key=key)
        data = response["Body"].read()
        logger.info(f"S3 download success: {key} ({len(data)} bytes)")
        return data
    except ClientError as e:
        logger.error(f"S3 download failed for {key}: {e}")
        raise StorageError(f"Failed to download {key}", error_code="DOWNLOAD_FAILED", context={"key": key})


def create_presigned_url(key: str, expires_in: int) -> str:
    try:
        return _get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": S3_BUCKET, "Key": key},
            ExpiresIn=expires_in,
        )
    except ClientError as e:
        logger.error(f"S3 presign failed for {key}: {e}")
        raise StorageError(f"Failed to sign {key}", error_code="SIGNED_URL_FAILED", context={"key": key})


class S3ObjectStore:
    """Async object store facade; boto3 calls run in worker threads."""

    async def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> bool:
        return await asyncio.to_thread(upload_bytes_to_s3, key, data, content_type)

    async def download(self, key: str) -> bytes:
        return await asyncio.to_thread(download_bytes_from_s3, key)

    async def create_signed_url(self, key: str, expires_in: int) -> str:
        return await asyncio.to_thread(create_presigned_url, key, expires_in)


_object_store = None


def get_object_store() -> S3ObjectStore:
    global _object_store
    if _object_store is None:
        _object_store = S3ObjectStore()
    return _object_store


# Content type mapping
CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def get_content_type(filename: str) -> str:
    """Get content type from filename extension."""
    ext = os.path.splitext(filename)[1].lower() if filename else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")
