"""
Bookings and money.
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from models.requests.admin import PayoutUpdateRequest
from services.platform_admin_service import PlatformAdminService
from .dependencies import get_platform_admin_service

router = APIRouter()


@router.get("/bookings")
async def list_bookings(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_bookings())


@router.put("/bookings/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    booking = await service.cancel_booking(booking_id)
    return ApiResponse.ok({"message": "Booking cancelled", "booking": booking})


@router.get("/financials")
async def get_financials(service: PlatformAdminService = Depends(get_platform_admin_service)):
    """Revenue split over completed payments, plus the pending payout total."""
    return ApiResponse.ok(await service.get_financials())


@router.get("/transactions")
async def list_transactions(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_transactions())


@router.get("/payouts")
async def list_payouts(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_payouts())


@router.put("/payouts/{payout_id}")
async def process_payout(
    payout_id: str,
    request: PayoutUpdateRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    payout = await service.process_payout(payout_id, request.status, request.transaction_id)
    return ApiResponse.ok(payout)
