"""
Verified reviews for gyms and trainers.

Only a booking the reviewer actually attended may be reviewed (a `used`
gym booking or a `completed` trainer booking), and only once.
"""

from typing import Any, Dict

from core.exceptions import BadRequestError, ConflictError, InsufficientPermissionsError
from core.logging import get_logger
from models.domain.enums import BookingStatus

logger = get_logger(__name__)


class ReviewsService:
    def __init__(self, repos):
        self.repos = repos

    async def create_review(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        if request.rating is None or not 1 <= request.rating <= 5:
            raise BadRequestError("Rating must be between 1 and 5")
        if not request.gym_id and not request.trainer_id:
            raise BadRequestError("Either gym_id or trainer_id is required")

        if request.booking_id:
            booking = await self.repos.bookings.get_for_user(request.booking_id, user["id"])
            if booking is None or booking.get("status") != BookingStatus.USED.value:
                raise InsufficientPermissionsError(message="You can only review gyms you have actually visited.")
        elif request.trainer_booking_id:
            booking = await self.repos.trainer_bookings.get_for_user(request.trainer_booking_id, user["id"])
            if booking is None or booking.get("status") != BookingStatus.COMPLETED.value:
                raise InsufficientPermissionsError(message="You can only review trainers you have trained with.")
        else:
            raise BadRequestError("Booking reference required for verification.")

        if await self.repos.reviews.exists_for_booking(request.booking_id, request.trainer_booking_id):
            raise ConflictError("You have already reviewed this booking")

        async with self.repos.db.transaction() as conn:
            review = await self.repos.reviews.create(
                {
                    "user_id": user["id"],
                    "gym_id": request.gym_id,
                    "trainer_id": request.trainer_id,
                    "booking_id": request.booking_id,
                    "trainer_booking_id": request.trainer_booking_id if not request.booking_id else None,
                    "rating": request.rating,
                    "comment": request.comment,
                },
                conn=conn,
            )
            if request.gym_id:
                stats = await self.repos.reviews.aggregate_for_gym(request.gym_id, conn=conn)
                await self.repos.gyms.set_rating(
                    request.gym_id, round(float(stats["average"]), 2), stats["total"], conn=conn
                )
            else:
                stats = await self.repos.reviews.aggregate_for_trainer(request.trainer_id, conn=conn)
                await self.repos.trainers.set_rating(
                    request.trainer_id, round(float(stats["average"]), 2), stats["total"], conn=conn
                )

        logger.info(f"Review {review['id']} ({request.rating}*) by {user['id']}")
        return review

    async def gym_reviews(self, gym_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        offset = (page - 1) * limit
        return {
            "reviews": await self.repos.reviews.list_for_gym(gym_id, limit, offset),
            "total": await self.repos.reviews.count_for_gym(gym_id),
        }

    async def trainer_reviews(self, trainer_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        offset = (page - 1) * limit
        return {
            "reviews": await self.repos.reviews.list_for_trainer(trainer_id, limit, offset),
            "total": await self.repos.reviews.count_for_trainer(trainer_id),
        }

    async def top_reviews(self, limit: int = 6):
        return await self.repos.reviews.list_top(limit)
