"""
Gym dashboard overview.
- GET /stats
- GET /profile, PUT /profile
- GET /bookings
- POST /verify-booking
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse
from models.requests import GymUpdateRequest, PassVerifyRequest
from services.auth import require_gym_admin
from services.gym_admin_service import GymAdminService
from .dependencies import get_gym_admin_service

router = APIRouter()


@router.get("/stats")
async def get_stats(
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.get_stats(user))


@router.get("/profile")
async def get_profile(
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    """The gym (with approval state), its services and its slots."""
    return ApiResponse.ok(await service.get_profile(user))


@router.put("/profile")
async def update_profile(
    request: GymUpdateRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    gym = await service.update_profile(user, request.model_dump(exclude_none=True))
    return ApiResponse.ok(gym)


@router.get("/bookings")
async def get_bookings(
    status: Optional[str] = None,
    booking_date: Optional[date] = Query(None, alias="date"),
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    return ApiResponse.ok(await service.list_bookings(user, status, booking_date))


@router.post("/verify-booking")
async def verify_booking(
    request: PassVerifyRequest,
    user: dict = Depends(require_gym_admin),
    service: GymAdminService = Depends(get_gym_admin_service),
):
    result = await service.verify_booking(user, request.qr_code, request.booking_id)
    return ApiResponse.ok(result)
