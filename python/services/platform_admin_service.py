"""
Platform administration: users, gym approval, trainers, bookings,
finances, settings and the public CMS content.
"""

from typing import Any, Dict, List, Optional

from core.exceptions import (
    BadRequestError,
    BookingNotFoundError,
    GymNotFoundError,
    InvalidActionError,
    NotFoundError,
    TrainerNotFoundError,
    UserNotFoundError,
)
from core.logging import get_logger
from models.domain.enums import PayoutStatus, UserRole

logger = get_logger(__name__)

RECENT_TRANSACTIONS = 100


class PlatformAdminService:
    def __init__(self, repos):
        self.repos = repos

    async def get_stats(self) -> Dict[str, Any]:
        totals = await self.repos.transactions.platform_totals()
        return {
            "total_users": await self.repos.users.count_by_role(UserRole.USER.value),
            "total_gyms": await self.repos.gyms.count_all(),
            "total_bookings": await self.repos.bookings.count_all(),
            "total_revenue": float(totals["total_revenue"] or 0),
            "active_subscriptions": await self.repos.subscriptions.count_active(),
        }

    # ============================================================
    # Users
    # ============================================================

    async def list_users(self) -> List[Dict[str, Any]]:
        return await self.repos.users.list_all()

    async def set_user_status(self, user_id: str, is_active: bool) -> Dict[str, Any]:
        user = await self.repos.users.set_active(user_id, is_active)
        if user is None:
            raise UserNotFoundError(user_id)
        logger.info(f"User {user_id} {'activated' if is_active else 'blocked'}")
        return user

    # ============================================================
    # Gyms
    # ============================================================

    async def list_gyms(self, is_approved: Optional[bool] = None) -> List[Dict[str, Any]]:
        return await self.repos.gyms.list_with_owner(is_approved)

    async def set_gym_approval(self, gym_id: str, is_approved: bool) -> Dict[str, Any]:
        gym = await self.repos.gyms.set_approved(gym_id, is_approved)
        if gym is None:
            raise GymNotFoundError(gym_id)
        logger.info(f"Gym {gym_id} {'approved' if is_approved else 'rejected'}")
        return gym

    async def set_gym_featured(self, gym_id: str, is_featured: bool) -> Dict[str, Any]:
        gym = await self.repos.gyms.set_featured(gym_id, is_featured)
        if gym is None:
            raise GymNotFoundError(gym_id)
        return gym

    # ============================================================
    # Trainers
    # ============================================================

    async def list_trainers(self) -> List[Dict[str, Any]]:
        return await self.repos.trainers.list_all()

    async def set_trainer_status(self, trainer_id: str, is_active: bool) -> Dict[str, Any]:
        trainer = await self.repos.trainers.set_active(trainer_id, is_active)
        if trainer is None:
            raise TrainerNotFoundError(trainer_id)
        return trainer

    async def assign_trainer(self, request) -> Dict[str, Any]:
        """Attach a user to a gym as its trainer; re-assigning updates the existing profile."""
        if await self.repos.users.get_by_id(request.user_id) is None:
            raise UserNotFoundError(request.user_id)
        if await self.repos.gyms.get_by_id(request.gym_id) is None:
            raise GymNotFoundError(request.gym_id)

        data = request.model_dump(exclude={"user_id", "gym_id"})
        async with self.repos.db.transaction() as conn:
            trainer = await self.repos.trainers.upsert_for_user(request.user_id, request.gym_id, data, conn=conn)
            await self.repos.users.promote_from_user(request.user_id, UserRole.TRAINER.value, conn=conn)

        logger.info(f"User {request.user_id} assigned as trainer to gym {request.gym_id}")
        return trainer

    # ============================================================
    # Bookings
    # ============================================================

    async def list_bookings(self) -> List[Dict[str, Any]]:
        return await self.repos.bookings.list_all()

    async def cancel_booking(self, booking_id: str) -> Dict[str, Any]:
        booking = await self.repos.bookings.cancel(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        logger.info(f"Booking {booking_id} cancelled by admin")
        return booking

    # ============================================================
    # Finance
    # ============================================================

    async def get_financials(self) -> Dict[str, float]:
        totals = await self.repos.transactions.platform_totals()
        return {
            "total_revenue": float(totals["total_revenue"] or 0),
            "platform_commission": float(totals["platform_commission"] or 0),
            "gym_earnings": float(totals["gym_earnings"] or 0),
            "pending_payouts": float(await self.repos.payouts.pending_total() or 0),
        }

    async def list_transactions(self) -> List[Dict[str, Any]]:
        return await self.repos.transactions.list_recent(RECENT_TRANSACTIONS)

    async def list_payouts(self) -> List[Dict[str, Any]]:
        return await self.repos.payouts.list_all()

    async def process_payout(self, payout_id: str, status: str, transaction_id: Optional[str]) -> Dict[str, Any]:
        if status not in {s.value for s in PayoutStatus}:
            raise BadRequestError(f"Unknown payout status: {status}")
        payout = await self.repos.payouts.process(payout_id, status, transaction_id)
        if payout is None:
            raise NotFoundError("Payout", payout_id)
        return payout

    # ============================================================
    # Settings & notifications
    # ============================================================

    async def get_settings(self) -> Dict[str, str]:
        return await self.repos.settings.get_all()

    async def update_settings(self, values: Dict[str, Any]) -> Dict[str, str]:
        if not values:
            raise BadRequestError("No settings provided")
        await self.repos.settings.upsert_many(values)
        logger.info(f"System settings updated: {', '.join(sorted(values))}")
        return await self.repos.settings.get_all()

    async def broadcast(self, title: str, message: str, type: str = "system") -> Dict[str, Any]:
        return await self.repos.notifications.broadcast(title, message, type)

    # ============================================================
    # CMS
    # ============================================================

    async def list_banners(self) -> List[Dict[str, Any]]:
        return await self.repos.banners.list_all()

    async def manage_banner(self, request) -> Dict[str, Any]:
        if request.action == "create":
            data = request.banner_data
            if not data.image_url:
                raise BadRequestError("image_url is required")
            banner = await self.repos.banners.insert(data.model_dump())
            return {"message": "Banner created", "banner": banner}

        if request.action == "delete":
            if not await self.repos.banners.delete(request.banner_id):
                raise NotFoundError("Banner", request.banner_id)
            return {"message": "Banner deleted"}

        raise InvalidActionError(request.action)

    async def list_pages(self) -> List[Dict[str, Any]]:
        return await self.repos.pages.list_all()

    async def update_page(self, slug: str, title: Optional[str], content: Optional[str]) -> Dict[str, Any]:
        page = await self.repos.pages.update_by_slug(slug, title, content)
        if page is None:
            raise NotFoundError("Page", slug)
        return page

    async def ads_performance(self) -> List[Dict[str, Any]]:
        return await self.repos.ads.list_performance()

    async def create_ad(self, request) -> Dict[str, Any]:
        if await self.repos.gyms.get_by_id(request.gym_id) is None:
            raise GymNotFoundError(request.gym_id)
        return await self.repos.ads.insert(request.model_dump())
