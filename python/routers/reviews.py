"""
Reviews API Router
Verified reviews: only attended bookings can be reviewed, once each.
"""

from fastapi import APIRouter, Depends, Query

from core.responses import ApiResponse, PaginationMeta
from models.requests import PaginationParams, ReviewCreateRequest
from services.auth import require_user
from services.reviews_service import ReviewsService

router = APIRouter()

reviews_service_instance: ReviewsService = None


def set_services(reviews_service: ReviewsService):
    global reviews_service_instance
    reviews_service_instance = reviews_service


def get_reviews_service() -> ReviewsService:
    if reviews_service_instance is None:
        raise RuntimeError("ReviewsService not initialized. Check server startup logs.")
    return reviews_service_instance


def _paginated(result: dict, pagination: PaginationParams) -> ApiResponse:
    meta = PaginationMeta.create(page=pagination.page, per_page=pagination.limit, total=result["total"])
    return ApiResponse.ok(result, meta=meta.model_dump())


@router.post("", status_code=201)
async def create_review(
    request: ReviewCreateRequest,
    user: dict = Depends(require_user),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    return ApiResponse.ok(await reviews_service.create_review(user, request))


@router.get("/top")
async def top_reviews(
    limit: int = Query(6, ge=1, le=50),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    """Recent 4 and 5 star reviews for the home page."""
    return ApiResponse.ok(await reviews_service.top_reviews(limit))


@router.get("/gym/{gym_id}")
async def gym_reviews(
    gym_id: str,
    pagination: PaginationParams = Depends(),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    result = await reviews_service.gym_reviews(gym_id, pagination.page, pagination.limit)
    return _paginated(result, pagination)


@router.get("/trainer/{trainer_id}")
async def trainer_reviews(
    trainer_id: str,
    pagination: PaginationParams = Depends(),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    result = await reviews_service.trainer_reviews(trainer_id, pagination.page, pagination.limit)
    return _paginated(result, pagination)
