"""
Platform overview, users, gyms and trainers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse
from models.requests.admin import (
    AssignTrainerRequest,
    GymFeaturedRequest,
    GymStatusRequest,
    TrainerStatusRequest,
    UserStatusRequest,
)
from services.platform_admin_service import PlatformAdminService
from .dependencies import get_platform_admin_service

router = APIRouter()


@router.get("/stats")
async def get_stats(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.get_stats())


# ============================================================
# Users
# ============================================================

@router.get("/users")
async def list_users(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_users())


@router.put("/users/{user_id}/status")
async def set_user_status(
    user_id: str,
    request: UserStatusRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    """Block or unblock an account. Blocked users fail authentication."""
    return ApiResponse.ok(await service.set_user_status(user_id, request.is_active))


# ============================================================
# Gyms
# ============================================================

@router.get("/gyms")
async def list_gyms(
    status: Optional[bool] = Query(None, description="Filter by approval state"),
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.list_gyms(status))


@router.put("/gyms/{gym_id}/status")
async def set_gym_status(
    gym_id: str,
    request: GymStatusRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.set_gym_approval(gym_id, request.is_approved))


@router.put("/gyms/{gym_id}/featured")
async def set_gym_featured(
    gym_id: str,
    request: GymFeaturedRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.set_gym_featured(gym_id, request.is_featured))


# ============================================================
# Trainers
# ============================================================

@router.get("/trainers")
async def list_trainers(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_trainers())


@router.post("/trainers", status_code=201)
async def assign_trainer(
    request: AssignTrainerRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    """Make an existing user a trainer at a gym."""
    return ApiResponse.ok(await service.assign_trainer(request))


@router.put("/trainers/{trainer_id}/status")
async def set_trainer_status(
    trainer_id: str,
    request: TrainerStatusRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.set_trainer_status(trainer_id, request.is_active))
