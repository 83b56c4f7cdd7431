"""
Gym bookings: pricing, slot capacity, payment capture and entry passes.

Flow:
    create_booking -> Razorpay checkout in the SPA -> verify_payment
    -> gym scans the QR -> verify_pass (one session consumed per scan)
"""

import time as clock
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from core.exceptions import (
    AppException,
    BadRequestError,
    BookingNotFoundError,
    OwnedGymNotFoundError,
    PassAlreadyUsedError,
    PassCancelledError,
    PassExpiredError,
    PassUnpaidError,
    ServiceNotFoundError,
    SlotFullError,
    SlotUnavailableError,
    TrainerNotFoundError,
)
from core.logging import get_logger
from models.domain.enums import BookingStatus, PaymentStatus, ServiceType, TransactionType, UserRole
from services.pricing import price_gym_booking, to_paise
from services.qr import new_entry_pass
from services.scheduling import (
    add_hours,
    compute_expiry,
    day_of_week,
    format_time,
    parse_time,
    session_hours,
    utcnow,
)

logger = get_logger(__name__)


def booking_receipt() -> str:
    return f"booking_{int(clock.time() * 1000)}"


def check_pass(booking: Dict[str, Any], now: Optional[datetime] = None) -> None:
    """
    Raise the first reason an entry pass must be refused, in this order:
    already used, unpaid, cancelled, expired.
    """
    if booking.get("status") == BookingStatus.USED.value:
        raise PassAlreadyUsedError(booking)
    if booking.get("payment_status") != PaymentStatus.COMPLETED.value:
        raise PassUnpaidError(booking)
    if booking.get("status") == BookingStatus.CANCELLED.value:
        raise PassCancelledError(booking)
    expires_at = booking.get("expires_at")
    if expires_at is not None and expires_at < (now or utcnow()):
        raise PassExpiredError(booking)


class BookingsService:
    def __init__(self, repos, razorpay, mailer, platform_settings):
        self.repos = repos
        self.razorpay = razorpay
        self.mailer = mailer
        self.platform = platform_settings

    # ============================================================
    # Create
    # ============================================================

    async def create_booking(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        """
        Price, capacity-check and store a booking, then open a gateway order.

        Args:
            user: Current user row
            request: BookingCreateRequest

        Returns:
            {booking, razorpay_order_id, razorpay_key_id, amount, currency}
        """
        service = await self.repos.services.get_active(request.service_id)
        if service is None or service["gym_id"] != request.gym_id:
            raise ServiceNotFoundError(request.service_id)

        service_type = service["service_type"]
        is_session = service_type == ServiceType.SESSION.value
        hours = request.duration_hours

        trainer_rate = 0.0
        if request.trainer_id:
            if not is_session:
                raise BadRequestError("A trainer can only be added to a session booking")
            trainer = await self.repos.trainers.get_active(request.trainer_id)
            if trainer is None:
                raise TrainerNotFoundError(request.trainer_id)
            trainer_rate = float(trainer.get("hourly_rate") or 0)

        commission_pct = await self.platform.commission_pct()
        price = price_gym_booking(service_type, service["price"], hours, commission_pct, trainer_rate)

        start = end = None
        if is_session:
            if not request.start_time:
                raise BadRequestError("Start time is required for session bookings")
            start = parse_time(request.start_time, "start_time")
            end = parse_time(request.end_time, "end_time") if request.end_time else add_hours(start, hours)

        expires_at = compute_expiry(service_type, request.booking_date, end, service.get("duration_days"))
        sessions = service.get("session_count") or 1
        qr_token, qr_image = new_entry_pass()
        receipt = booking_receipt()

        async with self.repos.db.transaction() as conn:
            if is_session:
                await self._reserve_hours(request.gym_id, request.booking_date, start, hours, conn)

            order = await self.razorpay.create_order(
                to_paise(price.total),
                receipt,
                notes={"gym_id": request.gym_id, "user_id": user["id"]},
            )

            booking = await self.repos.bookings.insert(
                {
                    "user_id": user["id"],
                    "gym_id": request.gym_id,
                    "service_id": request.service_id,
                    "trainer_id": request.trainer_id,
                    "booking_type": service_type,
                    "booking_date": request.booking_date,
                    "start_time": start,
                    "end_time": end,
                    "duration_hours": hours,
                    "qr_code": qr_token,
                    "qr_code_image": qr_image,
                    "total_amount": price.total,
                    "platform_commission": price.commission,
                    "gym_earnings": price.gym_earnings,
                    "trainer_earnings": price.trainer_earnings,
                    "razorpay_order_id": order["id"],
                    "payment_status": PaymentStatus.PENDING.value,
                    "status": BookingStatus.CONFIRMED.value,
                    "expires_at": expires_at,
                    "total_sessions": sessions,
                    "remaining_sessions": sessions,
                },
                conn=conn,
            )

        logger.info(f"Booking {booking['id']} created: {service_type} at gym {request.gym_id}, total {price.total}")
        return {
            "booking": booking,
            "razorpay_order_id": order["id"],
            "razorpay_key_id": self.razorpay.key_id,
            "amount": to_paise(price.total),
            "currency": order.get("currency", self.razorpay.currency),
        }

    async def _reserve_hours(self, gym_id: str, booking_date, start, hours: int, conn) -> None:
        """Every hour of the session needs an open slot with spare capacity."""
        dow = day_of_week(booking_date)
        for hour in session_hours(start, hours):
            label = format_time(hour)
            slot = await self.repos.slots.find_starting_at(gym_id, dow, hour, conn=conn)
            if slot is None:
                raise SlotUnavailableError(label)
            taken = await self.repos.bookings.count_covering(gym_id, booking_date, hour, conn=conn)
            if taken >= slot["max_capacity"]:
                raise SlotFullError(label)

    # ============================================================
    # Payment
    # ============================================================

    async def verify_payment(self, user: Dict[str, Any], request) -> Tuple[Dict[str, Any], bool]:
        """
        Capture a checkout result.

        Returns:
            (booking, newly_paid). newly_paid is False when the booking was
            already paid, in which case nothing is recorded again.
        """
        self.razorpay.require_valid_signature(
            request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
        )

        booking = await self.repos.bookings.get_for_user(request.booking_id, user["id"])
        if booking is None or booking.get("razorpay_order_id") != request.razorpay_order_id:
            raise BookingNotFoundError(request.booking_id)

        if booking.get("payment_status") == PaymentStatus.COMPLETED.value:
            logger.info(f"Booking {booking['id']} already paid, skipping")
            return booking, False

        async with self.repos.db.transaction() as conn:
            paid = await self.repos.bookings.mark_paid(booking["id"], request.razorpay_payment_id, conn=conn)
            if paid is None:
                # a concurrent verification got there first
                logger.info(f"Booking {booking['id']} already paid, skipping")
                current = await self.repos.bookings.get_for_user(booking["id"], user["id"], conn=conn)
                return current or booking, False
            booking = paid
            await self.repos.transactions.record(
                TransactionType.BOOKING.value,
                amount=booking["total_amount"],
                payment_id=request.razorpay_payment_id,
                user_id=user["id"],
                gym_id=booking["gym_id"],
                platform_commission=booking.get("platform_commission") or 0,
                metadata={
                    "booking_id": booking["id"],
                    "trainer_id": booking.get("trainer_id"),
                    "gym_earnings": booking.get("gym_earnings"),
                    "trainer_earnings": booking.get("trainer_earnings"),
                },
                conn=conn,
            )

        logger.info(f"Payment {request.razorpay_payment_id} captured for booking {booking['id']}")
        return booking, True

    async def notify_gym(self, booking: Dict[str, Any]) -> bool:
        """Email the gym about a paid booking. Runs as a background task; never raises."""
        try:
            contact = await self.repos.gyms.get_notification_contact(booking["gym_id"])
            recipient = contact and (contact.get("gym_email") or contact.get("owner_email"))
            if not recipient:
                logger.warning(f"No email on file for gym {booking['gym_id']}, notification skipped")
                return False
            details = await self.repos.bookings.get_notification_details(booking["id"]) or {}
            details["gym_name"] = contact.get("gym_name")
        except AppException as e:
            logger.error(f"Could not prepare notification for booking {booking.get('id')}: {e.message}")
            return False
        return await self.mailer.send_booking_notification(recipient, details)

    # ============================================================
    # Member operations
    # ============================================================

    async def get_booking(self, user: Dict[str, Any], booking_id: str) -> Dict[str, Any]:
        booking = await self.repos.bookings.get_detail_for_user(booking_id, user["id"])
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def cancel_booking(self, user: Dict[str, Any], booking_id: str) -> Dict[str, Any]:
        booking = await self.repos.bookings.cancel_confirmed_for_user(booking_id, user["id"])
        if booking is None:
            raise BookingNotFoundError(message="Booking not found or cannot be cancelled")
        logger.info(f"Booking {booking_id} cancelled by {user['id']}")
        return booking

    # ============================================================
    # Entry passes
    # ============================================================

    async def verify_pass(
        self,
        qr_code: Optional[str] = None,
        booking_id: Optional[str] = None,
        gym_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Admit a pass holder, consuming one session.

        Args:
            qr_code: Scanned QR token
            booking_id: Booking id typed in by staff (used when no qr_code)
            gym_id: Restrict the lookup to this gym

        Returns:
            {booking, remaining_sessions, message}
        """
        if not qr_code and not booking_id:
            raise BadRequestError("QR code or booking ID is required")

        booking = await self.repos.bookings.find_pass(qr_code=qr_code, booking_id=booking_id, gym_id=gym_id)
        if booking is None:
            raise BookingNotFoundError(message="Invalid QR code or booking not found")

        check_pass(booking)

        remaining = booking.get("remaining_sessions") or 1
        if remaining > 1:
            updated = await self.repos.bookings.consume_session(booking["id"], remaining)
        else:
            updated = await self.repos.bookings.mark_used(booking["id"], remaining)
        if updated is None:
            logger.warning(f"Pass {booking['id']} was admitted by a concurrent scan")
            raise PassAlreadyUsedError(booking)

        left = updated["remaining_sessions"]
        if left:
            message = f"Entry verified. {left} session(s) remaining"
        else:
            message = "Entry verified. Booking is now fully used"

        logger.info(f"Pass {booking['id']} admitted at gym {booking['gym_id']}, {left} left")
        return {"booking": {**booking, **updated}, "remaining_sessions": left, "message": message}

    async def validate_qr(self, user: Dict[str, Any], qr_code: Optional[str], booking_id: Optional[str] = None) -> Dict[str, Any]:
        """Scanner endpoint: gym owners only see their own gym's passes."""
        gym_id = None
        if user.get("role") != UserRole.ADMIN.value:
            gym = await self.repos.gyms.get_by_owner(user["id"])
            if gym is None:
                raise OwnedGymNotFoundError()
            gym_id = gym["id"]
        return await self.verify_pass(qr_code=qr_code, booking_id=booking_id, gym_id=gym_id)
