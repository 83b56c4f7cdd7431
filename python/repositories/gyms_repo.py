"""
Gyms repository: listings, services on sale, weekly time slots.
"""

from datetime import date, time
from typing import Optional, List, Dict, Any, Tuple

from pydantic import BaseModel

from models.domain.enums import CAPACITY_STATUSES
from repositories.base import BaseRepository

MIN_PRICE_SQL = (
    "(SELECT MIN(price) FROM gym_services WHERE gym_id = g.id AND is_active = true)"
)

GYM_UPDATABLE = (
    "name", "description", "address", "city", "state", "pincode",
    "latitude", "longitude", "phone", "email",
    "images", "videos", "facilities", "categories",
)


class GymSearchFilters(BaseModel):
    """Filters accepted by GymsRepository.search."""

    search: Optional[str] = None
    city: Optional[str] = None
    categories: Optional[List[str]] = None
    min_rating: Optional[float] = None
    service_type: Optional[str] = None
    has_single_session: bool = False
    open_day: Optional[int] = None
    open_time: Optional[time] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


class GymsRepository(BaseRepository):
    table_name = "gyms"
    entity_name = "Gym"

    # ============================================================
    # Public discovery
    # ============================================================

    def _search_where(self, filters: GymSearchFilters) -> Tuple[str, List[Any]]:
        clauses = ["g.is_approved = true", "g.is_active = true"]
        params: List[Any] = []

        def param(value) -> str:
            params.append(value)
            return f"${len(params)}"

        if filters.search:
            clauses.append(f"g.name ILIKE {param(f'%{filters.search}%')}")
        if filters.city:
            clauses.append(f"g.city ILIKE {param(f'%{filters.city}%')}")
        if filters.categories:
            clauses.append(f"g.categories && {param(filters.categories)}::text[]")
        if filters.min_rating is not None:
            clauses.append(f"g.rating >= {param(filters.min_rating)}")
        if filters.service_type:
            clauses.append(
                "EXISTS (SELECT 1 FROM gym_services s WHERE s.gym_id = g.id "
                f"AND s.service_type = {param(filters.service_type)} AND s.is_active = true)"
            )
        if filters.has_single_session:
            clauses.append(
                "EXISTS (SELECT 1 FROM gym_services s WHERE s.gym_id = g.id "
                "AND s.service_type = 'session' AND s.is_active = true)"
            )
        if filters.open_day is not None and filters.open_time is not None:
            day = param(filters.open_day)
            at = param(filters.open_time)
            clauses.append(
                "EXISTS (SELECT 1 FROM gym_time_slots ts WHERE ts.gym_id = g.id "
                f"AND ts.day_of_week = {day} AND ts.start_time <= {at} AND ts.end_time > {at} "
                "AND ts.is_active = true)"
            )
        if filters.min_price is not None:
            clauses.append(f"{MIN_PRICE_SQL} >= {param(filters.min_price)}")
        if filters.max_price is not None:
            clauses.append(f"{MIN_PRICE_SQL} <= {param(filters.max_price)}")

        return " AND ".join(clauses), params

    async def search(
        self,
        filters: GymSearchFilters,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Approved, active gyms matching filters, featured first then by rating.
        Pass limit=None to get every match (distance ranking paginates later).
        """
        where, params = self._search_where(filters)
        query = (
            f"SELECT g.*, {MIN_PRICE_SQL} AS min_price FROM gyms g WHERE {where} "
            "ORDER BY g.is_featured DESC, g.rating DESC, g.created_at DESC"
        )
        if limit is not None:
            params = params + [limit, offset]
            query += f" LIMIT ${len(params) - 1} OFFSET ${len(params)}"
        return await self._fetch(query, *params, operation="search")

    async def count_search(self, filters: GymSearchFilters) -> int:
        where, params = self._search_where(filters)
        return await self._fetchval(
            f"SELECT COUNT(*) FROM gyms g WHERE {where}",
            *params,
            operation="count_search",
        ) or 0

    async def list_located(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"""
            SELECT g.*, {MIN_PRICE_SQL} AS min_price
            FROM gyms g
            WHERE g.is_approved = true AND g.is_active = true
              AND g.latitude IS NOT NULL AND g.longitude IS NOT NULL
            """,
            operation="list_located",
        )

    async def list_by_category(self, category: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"""
            SELECT g.*, {MIN_PRICE_SQL} AS min_price
            FROM gyms g
            WHERE g.is_approved = true AND g.is_active = true
              AND $1 = ANY(g.categories)
            ORDER BY g.is_featured DESC, g.rating DESC
            """,
            category,
            operation="list_by_category",
        )

    async def get_approved(self, gym_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM gyms WHERE id = $1 AND is_approved = true",
            gym_id,
            operation="get_approved",
        )

    # ============================================================
    # Ownership
    # ============================================================

    async def get_by_owner(self, owner_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM gyms WHERE owner_id = $1 ORDER BY created_at LIMIT 1",
            owner_id,
            conn=conn,
            operation="get_by_owner",
        )

    async def create(self, owner_id: str, data: Dict[str, Any], conn=None) -> Dict[str, Any]:
        fields = {key: value for key, value in data.items() if key in GYM_UPDATABLE}
        fields["owner_id"] = owner_id
        return await self.insert(fields, conn=conn)

    async def update_profile(self, gym_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.update(gym_id, data, allowed=GYM_UPDATABLE, touch=True)

    async def get_notification_contact(self, gym_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT g.name AS gym_name, g.email AS gym_email, u.email AS owner_email
            FROM gyms g JOIN users u ON g.owner_id = u.id
            WHERE g.id = $1
            """,
            gym_id,
            operation="get_notification_contact",
        )

    # ============================================================
    # Ratings and promotion
    # ============================================================

    async def set_rating(self, gym_id: str, rating: float, total_reviews: int, conn=None) -> None:
        await self._execute(
            "UPDATE gyms SET rating = $2, total_reviews = $3, updated_at = NOW() WHERE id = $1",
            gym_id, rating, total_reviews,
            conn=conn,
            operation="set_rating",
        )

    async def set_featured(self, gym_id: str, is_featured: bool, featured_until=None, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE gyms SET is_featured = $2, featured_until = COALESCE($3, featured_until), updated_at = NOW()
            WHERE id = $1
            RETURNING id, name, is_featured, featured_until
            """,
            gym_id, is_featured, featured_until,
            conn=conn,
            operation="set_featured",
        )

    # ============================================================
    # Platform admin
    # ============================================================

    async def list_with_owner(self, is_approved: Optional[bool] = None) -> List[Dict[str, Any]]:
        query = (
            "SELECT g.*, u.name AS owner_name, u.email AS owner_email "
            "FROM gyms g JOIN users u ON g.owner_id = u.id"
        )
        params = []
        if is_approved is not None:
            query += " WHERE g.is_approved = $1"
            params.append(is_approved)
        query += " ORDER BY g.is_featured DESC NULLS LAST, g.created_at DESC"
        return await self._fetch(query, *params, operation="list_with_owner")

    async def set_approved(self, gym_id: str, is_approved: bool) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "UPDATE gyms SET is_approved = $2, updated_at = NOW() WHERE id = $1 RETURNING id, name, is_approved",
            gym_id, is_approved,
            operation="set_approved",
        )

    async def count_all(self) -> int:
        return await self._fetchval("SELECT COUNT(*) FROM gyms", operation="count_all") or 0


class GymServicesRepository(BaseRepository):
    table_name = "gym_services"
    entity_name = "Service"

    async def get_active(self, service_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM gym_services WHERE id = $1 AND is_active = true",
            service_id,
            conn=conn,
            operation="get_active",
        )

    async def list_active(self, gym_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM gym_services WHERE gym_id = $1 AND is_active = true ORDER BY price ASC",
            gym_id,
            operation="list_active",
        )

    async def list_for_gym(self, gym_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM gym_services WHERE gym_id = $1 ORDER BY created_at DESC",
            gym_id,
            operation="list_for_gym",
        )

    async def update_for_gym(self, service_id: str, gym_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {key: value for key, value in fields.items() if value is not None}
        if not fields:
            return await self._fetchrow(
                "SELECT * FROM gym_services WHERE id = $1 AND gym_id = $2",
                service_id, gym_id,
                operation="update_for_gym",
            )
        assignments = [f"{key} = ${i}" for i, key in enumerate(fields.keys(), start=3)]
        return await self._fetchrow(
            f"UPDATE gym_services SET {', '.join(assignments)}, updated_at = NOW() "
            "WHERE id = $1 AND gym_id = $2 RETURNING *",
            service_id, gym_id, *fields.values(),
            operation="update_for_gym",
        )

    async def delete_for_gym(self, service_id: str, gym_id: str) -> bool:
        result = await self._execute(
            "DELETE FROM gym_services WHERE id = $1 AND gym_id = $2",
            service_id, gym_id,
            operation="delete_for_gym",
        )
        return not result.endswith(" 0")


class TimeSlotsRepository(BaseRepository):
    table_name = "gym_time_slots"
    entity_name = "Slot"

    async def list_for_day(self, gym_id: str, day_of_week: int) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT * FROM gym_time_slots
            WHERE gym_id = $1 AND day_of_week = $2 AND is_active = true
            ORDER BY start_time
            """,
            gym_id, day_of_week,
            operation="list_for_day",
        )

    async def list_with_bookings(self, gym_id: str, day_of_week: int, booking_date: date) -> List[Dict[str, Any]]:
        """Active slots for a weekday with the count of bookings starting at each slot."""
        return await self._fetch(
            """
            SELECT ts.*,
                   (SELECT COUNT(*) FROM bookings b
                    WHERE b.gym_id = ts.gym_id AND b.booking_date = $3
                      AND b.start_time = ts.start_time
                      AND b.status = ANY($4::text[])) AS booked_count
            FROM gym_time_slots ts
            WHERE ts.gym_id = $1 AND ts.day_of_week = $2 AND ts.is_active = true
            ORDER BY ts.start_time
            """,
            gym_id, day_of_week, booking_date, list(CAPACITY_STATUSES),
            operation="list_with_bookings",
        )

    async def list_for_gym(self, gym_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM gym_time_slots WHERE gym_id = $1 ORDER BY day_of_week, start_time",
            gym_id,
            operation="list_for_gym",
        )

    async def find_starting_at(self, gym_id: str, day_of_week: int, start: time, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT * FROM gym_time_slots
            WHERE gym_id = $1 AND day_of_week = $2 AND start_time = $3 AND is_active = true
            LIMIT 1
            FOR UPDATE
            """,
            gym_id, day_of_week, start,
            conn=conn,
            operation="find_starting_at",
        )

    async def find_overlapping(self, gym_id: str, day_of_week: int, start: time, end: time, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT * FROM gym_time_slots
            WHERE gym_id = $1 AND day_of_week = $2 AND is_active = true
              AND start_time < $4 AND end_time > $3
            LIMIT 1
            """,
            gym_id, day_of_week, start, end,
            conn=conn,
            operation="find_overlapping",
        )

    async def count_active(self, gym_id: str) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM gym_time_slots WHERE gym_id = $1 AND is_active = true",
            gym_id,
            operation="count_active",
        ) or 0

    async def delete_for_gym(self, slot_id: str, gym_id: str) -> bool:
        result = await self._execute(
            "DELETE FROM gym_time_slots WHERE id = $1 AND gym_id = $2",
            slot_id, gym_id,
            operation="delete_for_gym",
        )
        return not result.endswith(" 0")
