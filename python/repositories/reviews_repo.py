"""
Reviews repository.
"""

from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository

REVIEW_SELECT = """
    SELECT r.*, u.name AS user_name, u.profile_image AS user_image
    FROM reviews r
    JOIN users u ON r.user_id = u.id
"""


class ReviewsRepository(BaseRepository):
    table_name = "reviews"
    entity_name = "Review"

    async def exists_for_booking(self, booking_id: Optional[str], trainer_booking_id: Optional[str]) -> bool:
        if booking_id:
            found = await self._fetchval(
                "SELECT 1 FROM reviews WHERE booking_id = $1",
                booking_id,
                operation="exists_for_booking",
            )
        else:
            found = await self._fetchval(
                "SELECT 1 FROM reviews WHERE trainer_booking_id = $1",
                trainer_booking_id,
                operation="exists_for_booking",
            )
        return found is not None

    async def create(self, data: Dict[str, Any], conn=None) -> Dict[str, Any]:
        fields = {key: value for key, value in data.items() if value is not None}
        fields["is_verified"] = True
        return await self.insert(fields, conn=conn)

    async def aggregate_for_gym(self, gym_id: str, conn=None) -> Dict[str, Any]:
        return await self._fetchrow(
            "SELECT COALESCE(AVG(rating), 0) AS average, COUNT(*) AS total FROM reviews WHERE gym_id = $1",
            gym_id,
            conn=conn,
            operation="aggregate_for_gym",
        )

    async def aggregate_for_trainer(self, trainer_id: str, conn=None) -> Dict[str, Any]:
        return await self._fetchrow(
            "SELECT COALESCE(AVG(rating), 0) AS average, COUNT(*) AS total FROM reviews WHERE trainer_id = $1",
            trainer_id,
            conn=conn,
            operation="aggregate_for_trainer",
        )

    async def list_for_gym(self, gym_id: str, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"{REVIEW_SELECT} WHERE r.gym_id = $1 ORDER BY r.is_verified DESC, r.created_at DESC LIMIT $2 OFFSET $3",
            gym_id, limit, offset,
            operation="list_for_gym",
        )

    async def count_for_gym(self, gym_id: str) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM reviews WHERE gym_id = $1",
            gym_id,
            operation="count_for_gym",
        ) or 0

    async def list_for_trainer(self, trainer_id: str, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"{REVIEW_SELECT} WHERE r.trainer_id = $1 ORDER BY r.is_verified DESC, r.created_at DESC LIMIT $2 OFFSET $3",
            trainer_id, limit, offset,
            operation="list_for_trainer",
        )

    async def count_for_trainer(self, trainer_id: str) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM reviews WHERE trainer_id = $1",
            trainer_id,
            operation="count_for_trainer",
        ) or 0

    async def rating_distribution(self, gym_id: str) -> Dict[int, int]:
        rows = await self._fetch(
            "SELECT rating, COUNT(*) AS count FROM reviews WHERE gym_id = $1 GROUP BY rating",
            gym_id,
            operation="rating_distribution",
        )
        distribution = {star: 0 for star in range(1, 6)}
        for row in rows:
            distribution[int(row["rating"])] = row["count"]
        return distribution

    async def list_top(self, limit: int = 6) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT r.*, u.name AS user_name, u.profile_image AS user_image,
                   g.name AS gym_name, g.city AS gym_city
            FROM reviews r
            JOIN users u ON r.user_id = u.id
            LEFT JOIN gyms g ON r.gym_id = g.id
            WHERE r.rating >= 4
            ORDER BY r.created_at DESC
            LIMIT $1
            """,
            limit,
            operation="list_top",
        )
