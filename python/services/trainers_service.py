"""
Trainer directory and direct trainer bookings.
"""

import time as clock
from typing import Any, Dict, List, Optional

from core.exceptions import BadRequestError, BookingNotFoundError, NotFoundError, TrainerNotFoundError, TrainerUnavailableError
from core.logging import get_logger
from models.domain.enums import BookingStatus, PaymentStatus, TransactionType
from services.pricing import price_trainer_booking, to_paise
from services.scheduling import parse_time

logger = get_logger(__name__)

LATEST_REVIEWS = 10


class TrainersService:
    def __init__(self, repos, razorpay, platform_settings):
        self.repos = repos
        self.razorpay = razorpay
        self.platform = platform_settings

    async def list_trainers(
        self,
        specialization: Optional[str] = None,
        gym_id: Optional[str] = None,
        min_rating: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        return await self.repos.trainers.list_active(specialization, gym_id, min_rating)

    async def get_my_profile(self, user: Dict[str, Any]) -> Dict[str, Any]:
        trainer = await self.repos.trainers.get_by_user(user["id"])
        if trainer is None:
            raise NotFoundError("Trainer", message="Trainer profile not found")
        upcoming = await self.repos.trainer_bookings.list_upcoming_for_trainer(trainer["id"])
        return {"trainer": trainer, "upcoming_bookings": upcoming}

    async def get_detail(self, trainer_id: str, user: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        trainer = await self.repos.trainers.get_active_detail(trainer_id)
        if trainer is None:
            raise TrainerNotFoundError(trainer_id)

        eligible_booking_id = None
        if user:
            eligible_booking_id = await self.repos.trainer_bookings.first_reviewable(trainer_id, user["id"])

        return {
            "trainer": trainer,
            "availability": await self.repos.availability.list_active(trainer_id),
            "reviews": await self.repos.reviews.list_for_trainer(trainer_id, LATEST_REVIEWS),
            "eligible_booking_id": eligible_booking_id,
        }

    # ============================================================
    # Booking
    # ============================================================

    async def book(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        trainer = await self.repos.trainers.get_active(request.trainer_id)
        if trainer is None:
            raise TrainerNotFoundError(request.trainer_id)

        start = parse_time(request.start_time, "start_time")
        end = parse_time(request.end_time, "end_time")
        if start >= end:
            raise BadRequestError("End time must be after start time")

        commission_pct = await self.platform.commission_pct()
        price = price_trainer_booking(trainer.get("hourly_rate") or 0, request.duration_hours, commission_pct)

        async with self.repos.db.transaction() as conn:
            await self.repos.trainers.lock(request.trainer_id, conn)
            clash = await self.repos.trainer_bookings.find_overlapping(
                request.trainer_id, request.booking_date, start, end, conn=conn
            )
            if clash:
                raise TrainerUnavailableError()

            order = await self.razorpay.create_order(
                to_paise(price.total),
                f"trainer_booking_{int(clock.time() * 1000)}",
                notes={"trainer_id": request.trainer_id, "user_id": user["id"]},
            )

            booking = await self.repos.trainer_bookings.insert(
                {
                    "user_id": user["id"],
                    "trainer_id": request.trainer_id,
                    "gym_id": trainer.get("gym_id"),
                    "booking_date": request.booking_date,
                    "start_time": start,
                    "end_time": end,
                    "duration_hours": request.duration_hours,
                    "total_amount": price.total,
                    "platform_commission": price.commission,
                    "trainer_earnings": price.trainer_earnings,
                    "razorpay_order_id": order["id"],
                    "payment_status": PaymentStatus.PENDING.value,
                    "status": BookingStatus.PENDING_PAYMENT.value,
                    "notes": request.notes,
                },
                conn=conn,
            )

        logger.info(f"Trainer booking {booking['id']} created for trainer {request.trainer_id}")
        return {
            "booking": booking,
            "razorpay_order_id": order["id"],
            "razorpay_key_id": self.razorpay.key_id,
            "amount": to_paise(price.total),
            "currency": order.get("currency", self.razorpay.currency),
        }

    async def verify_payment(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        """Confirm a paid trainer booking. Re-verifying a paid booking is a no-op."""
        self.razorpay.require_valid_signature(
            request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
        )

        booking = await self.repos.trainer_bookings.get_for_user(request.booking_id, user["id"])
        if booking is None or booking.get("razorpay_order_id") != request.razorpay_order_id:
            raise BookingNotFoundError(request.booking_id)

        if booking.get("payment_status") == PaymentStatus.COMPLETED.value:
            return booking

        async with self.repos.db.transaction() as conn:
            paid = await self.repos.trainer_bookings.mark_paid(booking["id"], request.razorpay_payment_id, conn=conn)
            if paid is None:
                current = await self.repos.trainer_bookings.get_for_user(booking["id"], user["id"], conn=conn)
                return current or booking
            booking = paid
            await self.repos.transactions.record(
                TransactionType.TRAINER_BOOKING.value,
                amount=booking["total_amount"],
                payment_id=request.razorpay_payment_id,
                user_id=user["id"],
                gym_id=booking.get("gym_id"),
                platform_commission=booking.get("platform_commission") or 0,
                metadata={
                    "trainer_booking_id": booking["id"],
                    "trainer_id": booking["trainer_id"],
                    "trainer_earnings": booking.get("trainer_earnings"),
                },
                conn=conn,
            )

        logger.info(f"Trainer booking {booking['id']} confirmed")
        return booking
