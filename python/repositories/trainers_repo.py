"""
Trainers repository: trainer profiles, weekly availability, direct bookings.

A trainer either has a linked user account (name comes from users) or is a
gym-managed profile with its own name column.
"""

from datetime import date, time
from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository

TRAINER_SELECT = """
    SELECT t.*, COALESCE(u.name, t.name) AS name,
           COALESCE(t.profile_image, u.profile_image) AS profile_image,
           u.email, u.phone,
           g.name AS gym_name, g.address AS gym_address, g.city AS gym_city
    FROM trainers t
    LEFT JOIN users u ON t.user_id = u.id
    LEFT JOIN gyms g ON t.gym_id = g.id
"""

TRAINER_UPDATABLE = (
    "name", "bio", "specializations", "certifications", "experience_years",
    "hourly_rate", "profile_image", "intro_video",
)

OCCUPYING_STATUSES = ["pending_payment", "confirmed", "completed"]


class TrainersRepository(BaseRepository):
    table_name = "trainers"
    entity_name = "Trainer"

    async def list_active(
        self,
        specialization: Optional[str] = None,
        gym_id: Optional[str] = None,
        min_rating: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        clauses = ["t.is_active = true"]
        params: List[Any] = []
        if specialization:
            params.append(specialization)
            clauses.append(f"${len(params)} = ANY(t.specializations)")
        if gym_id:
            params.append(gym_id)
            clauses.append(f"t.gym_id = ${len(params)}")
        if min_rating is not None:
            params.append(min_rating)
            clauses.append(f"t.rating >= ${len(params)}")

        query = f"{TRAINER_SELECT} WHERE {' AND '.join(clauses)} ORDER BY t.is_premium DESC, t.rating DESC"
        return await self._fetch(query, *params, operation="list_active")

    async def get_active_detail(self, trainer_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            f"{TRAINER_SELECT} WHERE t.id = $1 AND t.is_active = true",
            trainer_id,
            operation="get_active_detail",
        )

    async def get_active(self, trainer_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM trainers WHERE id = $1 AND is_active = true",
            trainer_id,
            conn=conn,
            operation="get_active",
        )

    async def lock(self, trainer_id: str, conn) -> None:
        """Row lock that serializes bookings of one trainer until the transaction ends."""
        await self._fetchval(
            "SELECT id FROM trainers WHERE id = $1 FOR UPDATE",
            trainer_id,
            conn=conn,
            operation="lock",
        )

    async def get_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            f"{TRAINER_SELECT} WHERE t.user_id = $1",
            user_id,
            operation="get_by_user",
        )

    async def list_for_gym_public(self, gym_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"{TRAINER_SELECT} WHERE t.gym_id = $1 AND t.is_active = true ORDER BY t.is_premium DESC, t.rating DESC",
            gym_id,
            operation="list_for_gym_public",
        )

    async def list_for_gym(self, gym_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            f"{TRAINER_SELECT} WHERE t.gym_id = $1 ORDER BY t.created_at DESC",
            gym_id,
            operation="list_for_gym",
        )

    async def get_for_gym(self, trainer_id: str, gym_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM trainers WHERE id = $1 AND gym_id = $2",
            trainer_id, gym_id,
            operation="get_for_gym",
        )

    async def create_for_gym(self, gym_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        fields = {key: value for key, value in data.items() if key in TRAINER_UPDATABLE and value is not None}
        fields["gym_id"] = gym_id
        return await self.insert(fields)

    async def update_for_gym(self, trainer_id: str, gym_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        fields = {key: value for key, value in data.items() if key in TRAINER_UPDATABLE and value is not None}
        if not fields:
            return await self.get_for_gym(trainer_id, gym_id)
        assignments = [f"{key} = ${i}" for i, key in enumerate(fields.keys(), start=3)]
        return await self._fetchrow(
            f"UPDATE trainers SET {', '.join(assignments)}, updated_at = NOW() "
            "WHERE id = $1 AND gym_id = $2 RETURNING *",
            trainer_id, gym_id, *fields.values(),
            operation="update_for_gym",
        )

    async def delete_for_gym(self, trainer_id: str, gym_id: str) -> bool:
        result = await self._execute(
            "DELETE FROM trainers WHERE id = $1 AND gym_id = $2",
            trainer_id, gym_id,
            operation="delete_for_gym",
        )
        return not result.endswith(" 0")

    async def set_rating(self, trainer_id: str, rating: float, total_reviews: int, conn=None) -> None:
        await self._execute(
            "UPDATE trainers SET rating = $2, total_reviews = $3, updated_at = NOW() WHERE id = $1",
            trainer_id, rating, total_reviews,
            conn=conn,
            operation="set_rating",
        )

    async def set_premium(self, trainer_id: str, premium_until, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE trainers SET is_premium = true, premium_until = $2, updated_at = NOW()
            WHERE id = $1 RETURNING *
            """,
            trainer_id, premium_until,
            conn=conn,
            operation="set_premium",
        )

    # ============================================================
    # Platform admin
    # ============================================================

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT t.*, COALESCE(u.name, t.name) AS name, g.name AS gym_name, o.email AS owner_email
            FROM trainers t
            LEFT JOIN users u ON t.user_id = u.id
            LEFT JOIN gyms g ON t.gym_id = g.id
            LEFT JOIN users o ON g.owner_id = o.id
            ORDER BY t.created_at DESC
            """,
            operation="list_all",
        )

    async def set_active(self, trainer_id: str, is_active: bool) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "UPDATE trainers SET is_active = $2, updated_at = NOW() WHERE id = $1 RETURNING *",
            trainer_id, is_active,
            operation="set_active",
        )

    async def upsert_for_user(self, user_id: str, gym_id: str, data: Dict[str, Any], conn=None) -> Dict[str, Any]:
        """Attach a user account to a gym as trainer, creating the profile if needed."""
        return await self._fetchrow(
            """
            INSERT INTO trainers (user_id, gym_id, bio, specializations, experience_years, certifications, hourly_rate)
            VALUES ($1, $2, $3, COALESCE($4, '{}'::text[]), COALESCE($5, 0), COALESCE($6, '{}'::text[]), COALESCE($7, 0))
            ON CONFLICT (user_id) DO UPDATE SET
                gym_id = EXCLUDED.gym_id,
                bio = COALESCE($3, trainers.bio),
                specializations = COALESCE($4, trainers.specializations),
                experience_years = COALESCE($5, trainers.experience_years),
                certifications = COALESCE($6, trainers.certifications),
                hourly_rate = COALESCE($7, trainers.hourly_rate),
                is_active = true,
                updated_at = NOW()
            RETURNING *
            """,
            user_id, gym_id,
            data.get("bio"), data.get("specializations"), data.get("experience_years"),
            data.get("certifications"), data.get("hourly_rate"),
            conn=conn,
            operation="upsert_for_user",
        )


class TrainerAvailabilityRepository(BaseRepository):
    table_name = "trainer_availability"
    entity_name = "Availability"

    async def list_active(self, trainer_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT * FROM trainer_availability
            WHERE trainer_id = $1 AND is_active = true
            ORDER BY day_of_week, start_time
            """,
            trainer_id,
            operation="list_active",
        )

    async def list_for_trainer(self, trainer_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM trainer_availability WHERE trainer_id = $1 ORDER BY day_of_week, start_time",
            trainer_id,
            operation="list_for_trainer",
        )

    async def find_overlapping(self, trainer_id: str, day_of_week: int, start: time, end: time, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT * FROM trainer_availability
            WHERE trainer_id = $1 AND day_of_week = $2 AND is_active = true
              AND start_time < $4 AND end_time > $3
            LIMIT 1
            """,
            trainer_id, day_of_week, start, end,
            conn=conn,
            operation="find_overlapping",
        )

    async def delete_for_gym(self, availability_id: str, gym_id: str) -> bool:
        result = await self._execute(
            """
            DELETE FROM trainer_availability a
            USING trainers t
            WHERE a.id = $1 AND a.trainer_id = t.id AND t.gym_id = $2
            """,
            availability_id, gym_id,
            operation="delete_for_gym",
        )
        return not result.endswith(" 0")


class TrainerBookingsRepository(BaseRepository):
    table_name = "trainer_bookings"
    entity_name = "Trainer booking"

    async def find_overlapping(
        self,
        trainer_id: str,
        booking_date: date,
        start: time,
        end: time,
        conn=None,
    ) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT id FROM trainer_bookings
            WHERE trainer_id = $1 AND booking_date = $2
              AND status = ANY($5::text[])
              AND start_time < $4 AND end_time > $3
            LIMIT 1
            """,
            trainer_id, booking_date, start, end, OCCUPYING_STATUSES,
            conn=conn,
            operation="find_overlapping",
        )

    async def get_for_user(self, booking_id: str, user_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM trainer_bookings WHERE id = $1 AND user_id = $2",
            booking_id, user_id,
            conn=conn,
            operation="get_for_user",
        )

    async def mark_paid(self, booking_id: str, payment_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE trainer_bookings
            SET payment_status = 'completed', payment_id = $2, status = 'confirmed', updated_at = NOW()
            WHERE id = $1 AND payment_status IS DISTINCT FROM 'completed'
            RETURNING *
            """,
            booking_id, payment_id,
            conn=conn,
            operation="mark_paid",
        )

    async def list_upcoming_for_trainer(self, trainer_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT tb.*, u.name AS user_name
            FROM trainer_bookings tb
            JOIN users u ON tb.user_id = u.id
            WHERE tb.trainer_id = $1 AND tb.booking_date >= CURRENT_DATE
            ORDER BY tb.booking_date, tb.start_time
            """,
            trainer_id,
            operation="list_upcoming_for_trainer",
        )

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT tb.*, g.name AS gym_name, g.address, g.images,
                   COALESCE(u.name, t.name) AS service_name,
                   COALESCE(u.name, t.name) AS trainer_name,
                   'trainer' AS type
            FROM trainer_bookings tb
            JOIN trainers t ON tb.trainer_id = t.id
            LEFT JOIN users u ON t.user_id = u.id
            LEFT JOIN gyms g ON tb.gym_id = g.id
            WHERE tb.user_id = $1
            ORDER BY tb.created_at DESC
            """,
            user_id,
            operation="list_for_user",
        )

    async def next_confirmed_for_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT tb.*, g.name AS gym_name, g.address, g.images,
                   COALESCE(u.name, t.name) AS service_name, 'trainer' AS type
            FROM trainer_bookings tb
            JOIN trainers t ON tb.trainer_id = t.id
            LEFT JOIN users u ON t.user_id = u.id
            LEFT JOIN gyms g ON tb.gym_id = g.id
            WHERE tb.user_id = $1 AND tb.status = 'confirmed'
              AND (tb.booking_date > CURRENT_DATE
                   OR (tb.booking_date = CURRENT_DATE AND tb.start_time > CURRENT_TIME))
            ORDER BY tb.booking_date ASC, tb.start_time ASC
            LIMIT 1
            """,
            user_id,
            operation="next_confirmed_for_user",
        )

    async def list_for_gym(self, gym_id: str, status: Optional[str] = None, booking_date: Optional[date] = None) -> List[Dict[str, Any]]:
        clauses = ["tb.gym_id = $1"]
        params: List[Any] = [gym_id]
        if status:
            params.append(status)
            clauses.append(f"tb.status = ${len(params)}")
        if booking_date:
            params.append(booking_date)
            clauses.append(f"tb.booking_date = ${len(params)}")
        return await self._fetch(
            f"""
            SELECT tb.*, u.name AS user_name, u.phone AS user_phone,
                   COALESCE(tu.name, t.name) AS service_name, 'trainer' AS type
            FROM trainer_bookings tb
            JOIN users u ON tb.user_id = u.id
            JOIN trainers t ON tb.trainer_id = t.id
            LEFT JOIN users tu ON t.user_id = tu.id
            WHERE {' AND '.join(clauses)}
            """,
            *params,
            operation="list_for_gym",
        )

    async def first_reviewable(self, trainer_id: str, user_id: str) -> Optional[str]:
        """First completed booking of the user with this trainer that has no review yet."""
        return await self._fetchval(
            """
            SELECT tb.id FROM trainer_bookings tb
            WHERE tb.trainer_id = $1 AND tb.user_id = $2 AND tb.status = 'completed'
              AND NOT EXISTS (SELECT 1 FROM reviews r WHERE r.trainer_booking_id = tb.id)
            ORDER BY tb.booking_date
            LIMIT 1
            """,
            trainer_id, user_id,
            operation="first_reviewable",
        )
