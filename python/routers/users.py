"""
Users API Router
Member profile, bookings, wishlist, dashboard stats, body metrics
and notifications. Every endpoint acts on the calling user.
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from models.requests import MetricsRequest, ProfileUpdateRequest
from services.auth import require_user
from services.users_service import UsersService

router = APIRouter()

users_service_instance: UsersService = None


def set_services(users_service: UsersService):
    global users_service_instance
    users_service_instance = users_service


def get_users_service() -> UsersService:
    if users_service_instance is None:
        raise RuntimeError("UsersService not initialized. Check server startup logs.")
    return users_service_instance


# ============================================================
# Profile
# ============================================================

@router.get("/profile")
async def get_profile(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    return ApiResponse.ok(await users_service.get_profile(user["id"]))


@router.put("/profile")
async def update_profile(
    request: ProfileUpdateRequest,
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    """Partial update; omitted fields keep their value."""
    profile = await users_service.update_profile(user["id"], request.model_dump(exclude_none=True))
    return ApiResponse.ok(profile)


@router.get("/bookings")
async def get_bookings(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    """Gym and trainer bookings, newest first, tagged with `type`."""
    return ApiResponse.ok(await users_service.list_bookings(user["id"]))


# ============================================================
# Wishlist
# ============================================================

@router.get("/wishlist")
async def get_wishlist(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    return ApiResponse.ok(await users_service.list_wishlist(user["id"]))


@router.post("/wishlist/{gym_id}", status_code=201)
async def add_to_wishlist(
    gym_id: str,
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    return ApiResponse.ok(await users_service.add_to_wishlist(user["id"], gym_id))


@router.delete("/wishlist/{gym_id}")
async def remove_from_wishlist(
    gym_id: str,
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    await users_service.remove_from_wishlist(user["id"], gym_id)
    return ApiResponse.ok({"message": "Removed from wishlist"})


# ============================================================
# Dashboard
# ============================================================

@router.get("/stats")
async def get_stats(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    """total_workouts, visited_gyms, streak and next_session."""
    return ApiResponse.ok(await users_service.get_stats(user["id"]))


@router.get("/metrics")
async def get_metrics(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    return ApiResponse.ok(await users_service.list_metrics(user["id"]))


@router.post("/metrics", status_code=201)
async def add_metrics(
    request: MetricsRequest,
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    entry = await users_service.record_metrics(user["id"], request.weight, request.height)
    return ApiResponse.ok(entry)


@router.get("/notifications")
async def get_notifications(
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    return ApiResponse.ok(await users_service.list_notifications(user["id"]))
