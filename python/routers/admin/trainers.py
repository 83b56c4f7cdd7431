"""
Gym trainers and their weekly availability.
- GET /trainers
- POST /trainers   multipart; action create|update|delete
- GET /trainers/{trainer_id}/availability
- POST /trainers/availability   action create|delete
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core.responses import ApiResponse
from models.requests.admin import ManageAvailabilityRequest
from services.auth import require_gym_admin
from services.gym_admin_service import GymAdminService
from .dependencies import get_gym_admin_service

router = APIRouter()


async def _read_part(upload: Optional[UploadFile]):
    """(bytes, filename, content_type) or None when the field was not sent."""
    if upload is None or not upload.filename:
        return None
    return await upload.read(), upload.filename, upload.content_type


@router.get("/trainers")
async def get_trainers(
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.list_trainers(user))


@router.post("/trainers")
async def manage_trainers(
    action: str = Form(...),
    trainer_id: Optional[str] = Form(None),
    trainer_data: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None),
    intro_video: Optional[UploadFile] = File(None),
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    result = await service.manage_trainer(
        user,
        action,
        trainer_id=trainer_id,
        trainer_data=trainer_data,
        profile_image=await _read_part(profile_image),
        intro_video=await _read_part(intro_video),
    )
    return ApiResponse.ok(result)


@router.get("/trainers/{trainer_id}/availability")
async def get_availability(
    trainer_id: str,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.list_availability(user, trainer_id))


@router.post("/trainers/availability")
async def manage_availability(
    request: ManageAvailabilityRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.manage_availability(user, request))
