"""
Trainers API Router
Directory, trainer self-profile and direct trainer bookings.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse
from models.requests import PaymentVerifyRequest, TrainerBookingCreateRequest
from services.auth import optional_user, require_user
from services.trainers_service import TrainersService

router = APIRouter()

trainers_service_instance: TrainersService = None


def set_services(trainers_service: TrainersService):
    global trainers_service_instance
    trainers_service_instance = trainers_service


def get_trainers_service() -> TrainersService:
    if trainers_service_instance is None:
        raise RuntimeError("TrainersService not initialized. Check server startup logs.")
    return trainers_service_instance


@router.get("")
async def list_trainers(
    specialization: Optional[str] = None,
    gym_id: Optional[str] = None,
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    trainers_service: TrainersService = Depends(get_trainers_service),
):
    """Active trainers, premium profiles first."""
    return ApiResponse.ok(await trainers_service.list_trainers(specialization, gym_id, min_rating))


@router.get("/me")
async def get_my_trainer_profile(
    user: dict = Depends(require_user),
    trainers_service: TrainersService = Depends(get_trainers_service),
):
    return ApiResponse.ok(await trainers_service.get_my_profile(user))


@router.post("/book", status_code=201)
async def book_trainer(
    request: TrainerBookingCreateRequest,
    user: dict = Depends(require_user),
    trainers_service: TrainersService = Depends(get_trainers_service),
):
    return ApiResponse.ok(await trainers_service.book(user, request))


@router.post("/verify-payment")
async def verify_trainer_payment(
    request: PaymentVerifyRequest,
    user: dict = Depends(require_user),
    trainers_service: TrainersService = Depends(get_trainers_service),
):
    booking = await trainers_service.verify_payment(user, request)
    return ApiResponse.ok({"message": "Payment verified successfully", "booking": booking})


@router.get("/{trainer_id}")
async def get_trainer(
    trainer_id: str,
    user: Optional[dict] = Depends(optional_user),
    trainers_service: TrainersService = Depends(get_trainers_service),
):
    return ApiResponse.ok(await trainers_service.get_detail(trainer_id, user))
