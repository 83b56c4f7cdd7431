"""
Paid promotions: featured gym listings (per day) and trainer premium (per month).
"""

import time as clock
from datetime import timedelta
from typing import Any, Dict, Tuple

from core.exceptions import (
    BadRequestError,
    ConflictError,
    GymNotFoundError,
    InsufficientPermissionsError,
    TrainerNotFoundError,
)
from core.logging import get_logger
from models.domain.enums import FeaturedPackage, TransactionType, UserRole
from services.pricing import money, to_paise
from services.scheduling import utcnow

logger = get_logger(__name__)

DAYS_PER_PREMIUM_MONTH = 30


def short_receipt(prefix: str, entity_id: str) -> str:
    """<prefix>_<first 8 of id>_<last 8 digits of ms clock>; stays well under 40 chars."""
    stamp = str(int(clock.time() * 1000))[-8:]
    return f"{prefix}_{str(entity_id)[:8]}_{stamp}"


def order_terms(order: Dict[str, Any], kind: str, subject_key: str, subject_id: str, quantity_key: str) -> Tuple[int, float]:
    """
    Quantity and amount (rupees) a gateway order was opened for.

    Raises:
        BadRequestError when the order was opened for a different purchase
    """
    notes = order.get("notes") or {}
    if notes.get("type") != kind or notes.get(subject_key) != str(subject_id):
        raise BadRequestError("Payment order does not match this purchase")
    try:
        quantity = int(notes[quantity_key])
    except (KeyError, ValueError):
        raise BadRequestError("Payment order does not match this purchase")
    return quantity, money(int(order["amount"]) / 100)


class MonetizationService:
    def __init__(self, repos, razorpay, platform_settings):
        self.repos = repos
        self.razorpay = razorpay
        self.platform = platform_settings

    # ============================================================
    # Ownership checks
    # ============================================================

    async def _owned_gym(self, user: Dict[str, Any], gym_id: str) -> Dict[str, Any]:
        gym = await self.repos.gyms.get_by_id(gym_id)
        if gym is None:
            raise GymNotFoundError(gym_id)
        if gym["owner_id"] != user["id"] and user.get("role") != UserRole.ADMIN.value:
            raise InsufficientPermissionsError(message="You can only promote your own gym")
        return gym

    async def _owned_trainer(self, user: Dict[str, Any], trainer_id: str) -> Dict[str, Any]:
        trainer = await self.repos.trainers.get_by_id(trainer_id)
        if trainer is None:
            raise TrainerNotFoundError(trainer_id)
        if trainer.get("user_id") != user["id"] and user.get("role") != UserRole.ADMIN.value:
            raise InsufficientPermissionsError(message="You can only upgrade your own trainer profile")
        return trainer

    def _order_response(self, order: Dict[str, Any], amount_paise: int) -> Dict[str, Any]:
        return {
            "order_id": order["id"],
            "amount": amount_paise,
            "currency": order.get("currency", self.razorpay.currency),
            "key_id": self.razorpay.key_id,
        }

    # ============================================================
    # Featured listings
    # ============================================================

    async def create_featured_order(self, user: Dict[str, Any], gym_id: str, days: int) -> Dict[str, Any]:
        await self._owned_gym(user, gym_id)
        daily_price = await self.platform.featured_daily_price()
        amount_paise = to_paise(daily_price * days)

        order = await self.razorpay.create_order(
            amount_paise,
            short_receipt("feat", gym_id),
            notes={"type": TransactionType.FEATURED_LISTING.value, "gym_id": gym_id, "days": days, "user_id": user["id"]},
        )
        return self._order_response(order, amount_paise)

    async def verify_featured_payment(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        """Activate the listing the paid order was opened for; days come from the order."""
        self.razorpay.require_valid_signature(
            request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
        )
        await self._owned_gym(user, request.gym_id)

        if await self.repos.transactions.exists_for_payment(request.razorpay_payment_id):
            logger.info(f"Featured payment {request.razorpay_payment_id} already recorded")
            return {"message": "Featured listing already active"}

        order = await self.razorpay.fetch_order(request.razorpay_order_id)
        days, amount = order_terms(order, TransactionType.FEATURED_LISTING.value, "gym_id", request.gym_id, "days")
        start = utcnow()
        end = start + timedelta(days=days)

        try:
            async with self.repos.db.transaction() as conn:
                await self.repos.transactions.record(
                    TransactionType.FEATURED_LISTING.value,
                    amount=amount,
                    payment_id=request.razorpay_payment_id,
                    gym_id=request.gym_id,
                    metadata={"days": days, "order_id": request.razorpay_order_id, "end_date": end.isoformat()},
                    conn=conn,
                )
                listing = await self.repos.featured.create(
                    request.gym_id,
                    FeaturedPackage.STANDARD.value,
                    amount,
                    start,
                    end,
                    request.razorpay_payment_id,
                    conn=conn,
                )
                await self.repos.gyms.set_featured(request.gym_id, True, end, conn=conn)
        except ConflictError:
            logger.info(f"Featured payment {request.razorpay_payment_id} recorded by a concurrent request")
            return {"message": "Featured listing already active"}

        logger.info(f"Gym {request.gym_id} featured for {days} day(s), until {end.isoformat()}")
        return {"message": "Featured listing activated", "listing": listing, "featured_until": end}

    # ============================================================
    # Trainer premium
    # ============================================================

    async def create_premium_order(self, user: Dict[str, Any], trainer_id: str, months: int) -> Dict[str, Any]:
        await self._owned_trainer(user, trainer_id)
        monthly_price = await self.platform.trainer_premium_price()
        amount_paise = to_paise(monthly_price * months)

        order = await self.razorpay.create_order(
            amount_paise,
            short_receipt("prem", trainer_id),
            notes={"type": TransactionType.TRAINER_PREMIUM.value, "trainer_id": trainer_id, "months": months},
        )
        return self._order_response(order, amount_paise)

    async def verify_premium_payment(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        """Extend the trainer's premium by the months the paid order was opened for."""
        self.razorpay.require_valid_signature(
            request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
        )
        trainer = await self._owned_trainer(user, request.trainer_id)

        if await self.repos.transactions.exists_for_payment(request.razorpay_payment_id):
            logger.info(f"Premium payment {request.razorpay_payment_id} already recorded")
            return {"message": "Premium profile already active"}

        order = await self.razorpay.fetch_order(request.razorpay_order_id)
        months, amount = order_terms(order, TransactionType.TRAINER_PREMIUM.value, "trainer_id", request.trainer_id, "months")
        premium_until = utcnow() + timedelta(days=DAYS_PER_PREMIUM_MONTH * months)

        try:
            async with self.repos.db.transaction() as conn:
                await self.repos.transactions.record(
                    TransactionType.TRAINER_PREMIUM.value,
                    amount=amount,
                    payment_id=request.razorpay_payment_id,
                    user_id=trainer.get("user_id"),
                    metadata={"trainer_id": request.trainer_id, "months": months, "order_id": request.razorpay_order_id},
                    conn=conn,
                )
                updated = await self.repos.trainers.set_premium(request.trainer_id, premium_until, conn=conn)
        except ConflictError:
            logger.info(f"Premium payment {request.razorpay_payment_id} recorded by a concurrent request")
            return {"message": "Premium profile already active"}

        logger.info(f"Trainer {request.trainer_id} premium until {premium_until.isoformat()}")
        return {"message": "Premium profile activated", "trainer": updated, "premium_until": premium_until}
