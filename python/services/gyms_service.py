"""
Gym discovery and owner registration.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from core.exceptions import BadRequestError, GymNotFoundError, InsufficientPermissionsError
from core.geo import DEFAULT_RADIUS_KM, rank_by_distance
from core.logging import get_logger
from models.domain.enums import UserRole
from repositories.gyms_repo import GymSearchFilters
from services.scheduling import day_of_week, parse_time

logger = get_logger(__name__)

LATEST_REVIEWS = 10


def split_categories(raw: Optional[str]) -> Optional[List[str]]:
    """"yoga, crossfit" -> ["yoga", "crossfit"]; blank -> None."""
    if not raw:
        return None
    items = [part.strip() for part in raw.split(",") if part.strip()]
    return items or None


def build_filters(
    search: Optional[str] = None,
    city: Optional[str] = None,
    category: Optional[str] = None,
    min_rating: Optional[float] = None,
    service_type: Optional[str] = None,
    has_single_session: bool = False,
    is_open: bool = False,
    match_time: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    now: Optional[datetime] = None,
) -> GymSearchFilters:
    """Turn query parameters into repository filters. Open-now checks today's weekday."""
    filters = GymSearchFilters(
        search=search,
        city=city,
        categories=split_categories(category),
        min_rating=min_rating,
        service_type=service_type,
        has_single_session=has_single_session,
        min_price=min_price,
        max_price=max_price,
    )
    if is_open or match_time:
        now = now or datetime.now()
        filters.open_day = day_of_week(now.date())
        filters.open_time = parse_time(match_time, "match_time") if match_time else now.time().replace(second=0, microsecond=0)
    return filters


def annotate_slots(slots: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    result = []
    for slot in slots:
        booked = int(slot.get("booked_count") or 0)
        capacity = int(slot.get("max_capacity") or 0)
        result.append({
            **slot,
            "booked_count": booked,
            "available": max(capacity - booked, 0),
            "is_full": booked >= capacity,
        })
    return result


class GymsService:
    def __init__(self, repos):
        self.repos = repos

    # ============================================================
    # Discovery
    # ============================================================

    async def search(
        self,
        filters: GymSearchFilters,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius: Optional[float] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        offset = (page - 1) * limit

        if latitude is None or longitude is None:
            gyms = await self.repos.gyms.search(filters, limit=limit, offset=offset)
            total = await self.repos.gyms.count_search(filters)
            return {"gyms": gyms, "total": total, "search_expanded": False}

        candidates = await self.repos.gyms.search(filters)
        ranked, expanded = rank_by_distance(
            candidates, latitude, longitude,
            radius_km=radius if radius is not None else DEFAULT_RADIUS_KM,
        )
        return {
            "gyms": ranked[offset:offset + limit],
            "total": len(ranked),
            "search_expanded": expanded,
        }

    async def nearby(
        self,
        latitude: Optional[float],
        longitude: Optional[float],
        radius: Optional[float] = None,
    ) -> Dict[str, Any]:
        if latitude is None or longitude is None:
            raise BadRequestError("Latitude and longitude are required")

        gyms = await self.repos.gyms.list_located()
        ranked, expanded = rank_by_distance(
            gyms, latitude, longitude,
            radius_km=radius if radius is not None else DEFAULT_RADIUS_KM,
        )
        if not expanded:
            # stable: distance order is kept inside each group
            ranked.sort(key=lambda g: not g.get("is_featured"))
        return {"gyms": ranked, "search_expanded": expanded}

    async def by_category(self, category: str) -> List[Dict[str, Any]]:
        return await self.repos.gyms.list_by_category(category)

    async def get_detail(self, gym_id: str, user: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        gym = await self.repos.gyms.get_approved(gym_id)
        if gym is None:
            raise GymNotFoundError(gym_id)

        eligible_booking_id = None
        if user:
            eligible_booking_id = await self.repos.bookings.first_reviewable(gym_id, user["id"])

        return {
            "gym": gym,
            "services": await self.repos.services.list_active(gym_id),
            "trainers": await self.repos.trainers.list_for_gym_public(gym_id),
            "reviews": await self.repos.reviews.list_for_gym(gym_id, LATEST_REVIEWS),
            "rating_distribution": await self.repos.reviews.rating_distribution(gym_id),
            "eligible_booking_id": eligible_booking_id,
        }

    async def get_slots(self, gym_id: str, booking_date: date) -> List[Dict[str, Any]]:
        slots = await self.repos.slots.list_with_bookings(gym_id, day_of_week(booking_date), booking_date)
        return annotate_slots(slots)

    # ============================================================
    # Registration and editing
    # ============================================================

    async def register(self, user: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        """Create an unapproved gym for `user`, promoting a plain user to gym_owner."""
        missing = [f for f in ("name", "address", "city") if not (data.get(f) or "").strip()]
        if missing:
            raise BadRequestError(f"Missing required fields: {', '.join(missing)}", details={"fields": missing})
        if not data.get("categories"):
            raise BadRequestError("At least one category is required")

        async with self.repos.db.transaction() as conn:
            gym = await self.repos.gyms.create(user["id"], data, conn=conn)
            await self.repos.users.promote_from_user(user["id"], UserRole.GYM_OWNER.value, conn=conn)

        logger.info(f"Gym {gym['id']} registered by {user['id']} (pending approval)")
        return gym

    async def update(self, user: Dict[str, Any], gym_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        gym = await self.repos.gyms.get_by_id(gym_id)
        if gym is None:
            raise GymNotFoundError(gym_id)
        if gym["owner_id"] != user["id"] and user.get("role") != UserRole.ADMIN.value:
            raise InsufficientPermissionsError(message="Not authorized to update this gym")
        return await self.repos.gyms.update_profile(gym_id, data)
