"""
Bookings API Router
- POST /                 create a booking and its gateway order
- POST /verify-payment   capture the checkout result
- POST /validate-qr      admit a pass holder (gym staff)
- GET  /{booking_id}
- PUT  /{booking_id}/cancel
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from core.responses import ApiResponse
from core.logging import get_logger
from models.requests import BookingCreateRequest, PassVerifyRequest, PaymentVerifyRequest
from services.auth import require_gym_admin, require_user
from services.bookings_service import BookingsService

logger = get_logger(__name__)
router = APIRouter()

bookings_service_instance: BookingsService = None


def set_services(bookings_service: BookingsService):
    global bookings_service_instance
    bookings_service_instance = bookings_service


def get_bookings_service() -> BookingsService:
    if bookings_service_instance is None:
        raise RuntimeError("BookingsService not initialized. Check server startup logs.")
    return bookings_service_instance


@router.post("", status_code=201)
async def create_booking(
    request: BookingCreateRequest,
    user: dict = Depends(require_user),
    bookings_service: BookingsService = Depends(get_bookings_service),
):
    """
    Book a session, pass or membership.

    The response carries the gateway order the SPA opens checkout with.
    """
    result = await bookings_service.create_booking(user, request)
    return ApiResponse.ok(result)


@router.post("/verify-payment")
async def verify_payment(
    request: PaymentVerifyRequest,
    background_tasks: BackgroundTasks,
    user: dict = Depends(require_user),
    bookings_service: BookingsService = Depends(get_bookings_service),
):
    booking, newly_paid = await bookings_service.verify_payment(user, request)
    if newly_paid:
        background_tasks.add_task(bookings_service.notify_gym, booking)
    return ApiResponse.ok({"message": "Payment verified successfully", "booking": booking})


@router.post("/validate-qr")
async def validate_qr(
    request: PassVerifyRequest,
    user: dict = Depends(require_gym_admin),
    bookings_service: BookingsService = Depends(get_bookings_service),
):
    result = await bookings_service.validate_qr(user, request.qr_code, request.booking_id)
    return ApiResponse.ok(result)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    user: dict = Depends(require_user),
    bookings_service: BookingsService = Depends(get_bookings_service),
):
    return ApiResponse.ok(await bookings_service.get_booking(user, booking_id))


@router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    user: dict = Depends(require_user),
    bookings_service: BookingsService = Depends(get_bookings_service),
):
    booking = await bookings_service.cancel_booking(user, booking_id)
    return ApiResponse.ok({"message": "Booking cancelled", "booking": booking})
