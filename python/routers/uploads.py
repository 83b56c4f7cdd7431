"""
Uploads API Router
- POST /image   store an image in MinIO, returns its public url
"""

from fastapi import APIRouter, Depends, File, UploadFile

from core.responses import ApiResponse
from core.logging import get_logger
from infrastructure.minio_storage import MinioStorage, check_upload
from services.auth import require_user

logger = get_logger(__name__)
router = APIRouter()

storage_instance: MinioStorage = None


def set_services(storage: MinioStorage):
    global storage_instance
    storage_instance = storage


def get_storage() -> MinioStorage:
    if storage_instance is None:
        raise RuntimeError("MinioStorage not initialized. Check server startup logs.")
    return storage_instance


@router.post("/image")
async def upload_image(
    image: UploadFile = File(...),
    user: dict = Depends(require_user),
    storage: MinioStorage = Depends(get_storage),
):
    """
    Upload an image (gym photos, avatars, banners).

    Returns:
        url: Public URL of uploaded file
        object_name: MinIO object name
        size: File size in bytes
    """
    file_data = await image.read()
    check_upload(file_data, image.content_type, kind="image")

    original_filename = image.filename or "image.jpg"
    result = await storage.upload(file_data, original_filename, image.content_type)
    logger.info(f"User {user['id']} uploaded {original_filename} -> {result['object_name']}")

    return ApiResponse.ok({
        "url": result["url"],
        "object_name": result["object_name"],
        "size": result["size"],
    })
