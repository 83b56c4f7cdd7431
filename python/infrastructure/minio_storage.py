"""
MinIO Storage Service.
Handles media uploads (gym photos, trainer portraits, intro videos)
in MinIO S3-compatible storage.
"""

import asyncio
import io
from typing import Optional

from minio import Minio
from minio.error import S3Error
from PIL import Image, UnidentifiedImageError

from core.config import settings
from core.exceptions import AppException, BadRequestError, PayloadTooLargeError
from core.logging import get_logger
from core.slug import unique_object_name

logger = get_logger(__name__)


class StorageError(AppException):
    def __init__(self, message: str):
        super().__init__(message=message, code="STORAGE_ERROR", status_code=502)


def validate_image_bytes(file_data: bytes) -> None:
    """Raise BadRequestError unless Pillow can decode the bytes as an image."""
    try:
        with Image.open(io.BytesIO(file_data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise BadRequestError(f"Uploaded file is not a valid image: {e}", code="INVALID_IMAGE")


def check_upload(file_data: bytes, content_type: Optional[str], kind: str = "image") -> None:
    """
    Shared upload gate: non-empty, right MIME family, within MAX_UPLOAD_MB.
    Images are additionally decoded with Pillow.
    """
    if not file_data:
        raise BadRequestError("Empty file", code="EMPTY_FILE")
    if not (content_type or "").startswith(f"{kind}/"):
        raise BadRequestError(f"Only {kind} files are allowed", code="INVALID_FILE_TYPE")
    if len(file_data) > settings.max_upload_mb * 1024 * 1024:
        raise PayloadTooLargeError(settings.max_upload_mb)
    if kind == "image":
        validate_image_bytes(file_data)


class MinioStorage:
    """MinIO storage service for file operations."""

    def __init__(self, client: Minio = None):
        self.bucket = settings.minio_bucket
        self.public_url = settings.minio_public_url.rstrip("/")
        self._bucket_checked = False

        self.client = client or Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )

        logger.info(f"MinIO storage initialized: {settings.minio_endpoint}/{self.bucket}")

    def _ensure_bucket(self):
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created bucket {self.bucket}")
        self._bucket_checked = True

    def upload_file(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/jpeg",
        folder: str = "uploads"
    ) -> dict:
        """
        Upload file to MinIO.

        Args:
            file_data: File bytes
            filename: Original filename (used for slug generation)
            content_type: MIME type
            folder: Key prefix inside the bucket, e.g. "uploads", "trainers"

        Returns:
            Dict with url, object_name and size
        """
        object_name = unique_object_name(filename, folder=folder)

        try:
            self._ensure_bucket()
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=object_name,
                data=io.BytesIO(file_data),
                length=len(file_data),
                content_type=content_type
            )
        except S3Error as e:
            logger.error(f"MinIO upload error: {e}")
            raise StorageError(f"Failed to store file: {e.code}")

        url = f"{self.public_url}/{self.bucket}/{object_name}"
        logger.info(f"Uploaded {object_name} ({len(file_data)} bytes)")

        return {
            "url": url,
            "object_name": object_name,
            "size": len(file_data),
        }

    async def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str,
        folder: str = "uploads"
    ) -> dict:
        """Non-blocking wrapper around upload_file."""
        return await asyncio.to_thread(self.upload_file, file_data, filename, content_type, folder)


# Singleton instance
_minio_storage: Optional[MinioStorage] = None


def get_minio_storage() -> MinioStorage:
    """Get singleton MinIO storage instance."""
    global _minio_storage
    if _minio_storage is None:
        _minio_storage = MinioStorage()
    return _minio_storage
