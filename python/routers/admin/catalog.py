"""
What the gym sells and when it is open.
- POST /services   action create|update|delete
- POST /featured   buy a featured package
- GET /slots, POST /slots   action create|delete
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from models.requests.admin import FeaturedPackageRequest, ManageServiceRequest, ManageSlotRequest
from services.auth import require_gym_admin
from services.gym_admin_service import GymAdminService
from .dependencies import get_gym_admin_service

router = APIRouter()


@router.post("/services")
async def manage_services(
    request: ManageServiceRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.manage_service(user, request))


@router.post("/featured")
async def buy_featured_package(
    request: FeaturedPackageRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    """basic 999, premium 2499, platinum 4999; anything else is billed as basic."""
    result = await service.buy_featured_package(user, request.package_type, request.duration_days)
    return ApiResponse.ok(result)


@router.get("/slots")
async def get_slots(
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.list_slots(user))


@router.post("/slots")
async def manage_slots(
    request: ManageSlotRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.manage_slot(user, request))
