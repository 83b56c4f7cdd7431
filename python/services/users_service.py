"""
Member area: profile, merged bookings, wishlist, dashboard stats, metrics.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from core.exceptions import BadRequestError, ConflictError, GymNotFoundError, UserNotFoundError
from core.logging import get_logger
from models.domain.enums import SELF_ASSIGNABLE_ROLES
from services.scheduling import sortable_stamp
from services.stats import compute_bmi, compute_streak

logger = get_logger(__name__)


def merge_bookings(gym_bookings: List[Dict[str, Any]], trainer_bookings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Both booking kinds in one list, newest first, tagged with `type`."""
    merged = [dict(b, type="gym") for b in gym_bookings]
    merged += [dict(b, type="trainer") for b in trainer_bookings]
    merged.sort(key=lambda b: sortable_stamp(b.get("created_at")), reverse=True)
    return merged


def earliest_session(*candidates: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    found = [c for c in candidates if c]
    if not found:
        return None
    return min(found, key=lambda b: (sortable_stamp(b.get("booking_date")), b.get("start_time") or ""))


class UsersService:
    def __init__(self, repos):
        self.repos = repos

    # ============================================================
    # Profile and role
    # ============================================================

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        profile = await self.repos.users.get_profile(user_id)
        if profile is None:
            raise UserNotFoundError(user_id)
        return profile

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        profile = await self.repos.users.update_profile(user_id, fields)
        if profile is None:
            raise UserNotFoundError(user_id)
        return profile

    async def update_role(self, user_id: str, role: str) -> Dict[str, Any]:
        allowed = [r.value for r in SELF_ASSIGNABLE_ROLES]
        if role not in allowed:
            raise BadRequestError("Invalid role", code="INVALID_ROLE", details={"allowed": allowed})
        user = await self.repos.users.set_role(user_id, role)
        if user is None:
            raise UserNotFoundError(user_id)
        logger.info(f"User {user_id} switched role to {role}")
        return user

    # ============================================================
    # Bookings
    # ============================================================

    async def list_bookings(self, user_id: str) -> List[Dict[str, Any]]:
        gym_bookings = await self.repos.bookings.list_for_user(user_id)
        trainer_bookings = await self.repos.trainer_bookings.list_for_user(user_id)
        return merge_bookings(gym_bookings, trainer_bookings)

    # ============================================================
    # Wishlist
    # ============================================================

    async def list_wishlist(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.repos.wishlist.list_for_user(user_id)

    async def add_to_wishlist(self, user_id: str, gym_id: str) -> Dict[str, Any]:
        if await self.repos.gyms.get_by_id(gym_id) is None:
            raise GymNotFoundError(gym_id)
        if await self.repos.wishlist.exists(user_id, gym_id):
            raise ConflictError("Gym already in wishlist")
        return await self.repos.wishlist.add(user_id, gym_id)

    async def remove_from_wishlist(self, user_id: str, gym_id: str) -> None:
        await self.repos.wishlist.remove(user_id, gym_id)

    # ============================================================
    # Dashboard
    # ============================================================

    async def get_stats(self, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
        summary = await self.repos.bookings.attendance_summary(user_id)
        next_gym = await self.repos.bookings.next_confirmed_for_user(user_id)
        next_trainer = await self.repos.trainer_bookings.next_confirmed_for_user(user_id)

        return {
            "total_workouts": summary["total_workouts"],
            "visited_gyms": summary["visited_gyms"],
            "streak": compute_streak(summary["dates"], today=today),
            "next_session": earliest_session(next_gym, next_trainer),
        }

    async def list_metrics(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.repos.metrics.list_for_user(user_id)

    async def record_metrics(self, user_id: str, weight: Optional[float], height: Optional[float]) -> Dict[str, Any]:
        bmi = compute_bmi(weight, height)
        return await self.repos.metrics.record(user_id, weight, height, bmi)

    async def list_notifications(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.repos.notifications.list_for_user(user_id)
