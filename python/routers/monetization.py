"""
Monetization API Router
Featured gym listings (priced per day) and trainer premium (per month).
Each purchase is an order call followed by a verify call after checkout.
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from models.requests import (
    FeaturedOrderRequest,
    FeaturedVerifyRequest,
    PremiumOrderRequest,
    PremiumVerifyRequest,
)
from services.auth import require_user
from services.monetization_service import MonetizationService

router = APIRouter()

monetization_service_instance: MonetizationService = None


def set_services(monetization_service: MonetizationService):
    global monetization_service_instance
    monetization_service_instance = monetization_service


def get_monetization_service() -> MonetizationService:
    if monetization_service_instance is None:
        raise RuntimeError("MonetizationService not initialized. Check server startup logs.")
    return monetization_service_instance


@router.post("/featured/order")
async def create_featured_order(
    request: FeaturedOrderRequest,
    user: dict = Depends(require_user),
    service: MonetizationService = Depends(get_monetization_service),
):
    return ApiResponse.ok(await service.create_featured_order(user, request.gym_id, request.days))


@router.post("/featured/verify")
async def verify_featured_payment(
    request: FeaturedVerifyRequest,
    user: dict = Depends(require_user),
    service: MonetizationService = Depends(get_monetization_service),
):
    return ApiResponse.ok(await service.verify_featured_payment(user, request))


@router.post("/trainer-premium/order")
async def create_premium_order(
    request: PremiumOrderRequest,
    user: dict = Depends(require_user),
    service: MonetizationService = Depends(get_monetization_service),
):
    return ApiResponse.ok(await service.create_premium_order(user, request.trainer_id, request.months))


@router.post("/trainer-premium/verify")
async def verify_premium_payment(
    request: PremiumVerifyRequest,
    user: dict = Depends(require_user),
    service: MonetizationService = Depends(get_monetization_service),
):
    return ApiResponse.ok(await service.verify_premium_payment(user, request))
