"""
Gyms API Router
Public discovery (search, nearby, category, detail, slots) plus
registration and editing by owners.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse, PaginationMeta
from models.requests import GymCreateRequest, GymUpdateRequest
from services.auth import optional_user, require_user
from services.gyms_service import GymsService, build_filters

router = APIRouter()

gyms_service_instance: GymsService = None


def set_services(gyms_service: GymsService):
    global gyms_service_instance
    gyms_service_instance = gyms_service


def get_gyms_service() -> GymsService:
    if gyms_service_instance is None:
        raise RuntimeError("GymsService not initialized. Check server startup logs.")
    return gyms_service_instance


@router.get("/search")
async def search_gyms(
    search: Optional[str] = None,
    city: Optional[str] = None,
    category: Optional[str] = Query(None, description="Comma separated categories"),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    service_type: Optional[str] = None,
    has_single_session: bool = False,
    is_open: bool = False,
    match_time: Optional[str] = Query(None, description="HH:MM; gyms with a slot covering this time today"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="km, default 10"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    """
    Search approved gyms.

    Without coordinates results are featured first, then by rating.
    With coordinates they are ranked by distance; when nothing lies inside
    the radius the closest few are returned and `search_expanded` is set.
    """
    filters = build_filters(
        search=search,
        city=city,
        category=category,
        min_rating=min_rating,
        service_type=service_type,
        has_single_session=has_single_session,
        is_open=is_open,
        match_time=match_time,
        min_price=min_price,
        max_price=max_price,
    )
    result = await gyms_service.search(filters, latitude, longitude, radius, page, limit)
    meta = PaginationMeta.create(page=page, per_page=limit, total=result["total"]).model_dump()
    return ApiResponse.ok(result, meta=meta)


@router.get("/nearby")
async def nearby_gyms(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    return ApiResponse.ok(await gyms_service.nearby(latitude, longitude, radius))


@router.get("/category/{category}")
async def gyms_by_category(
    category: str,
    gyms_service: GymsService = Depends(get_gyms_service),
):
    return ApiResponse.ok(await gyms_service.by_category(category))


@router.post("", status_code=201)
async def register_gym(
    request: GymCreateRequest,
    user: dict = Depends(require_user),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    """Register a gym. It stays hidden until a platform admin approves it."""
    gym = await gyms_service.register(user, request.model_dump())
    return ApiResponse.ok(gym)


@router.get("/{gym_id}")
async def get_gym(
    gym_id: str,
    user: Optional[dict] = Depends(optional_user),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    return ApiResponse.ok(await gyms_service.get_detail(gym_id, user))


@router.put("/{gym_id}")
async def update_gym(
    gym_id: str,
    request: GymUpdateRequest,
    user: dict = Depends(require_user),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    gym = await gyms_service.update(user, gym_id, request.model_dump(exclude_none=True))
    return ApiResponse.ok(gym)


@router.get("/{gym_id}/slots")
async def get_gym_slots(
    gym_id: str,
    booking_date: date = Query(..., alias="date"),
    gyms_service: GymsService = Depends(get_gyms_service),
):
    """Slots for the weekday of `date` with live availability."""
    return ApiResponse.ok(await gyms_service.get_slots(gym_id, booking_date))
