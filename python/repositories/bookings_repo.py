"""
Gym bookings repository.
"""

from datetime import date, time
from typing import Optional, List, Dict, Any

from models.domain.enums import ACTIVE_STATUSES, ATTENDED_STATUSES, CAPACITY_STATUSES
from repositories.base import BaseRepository


class BookingsRepository(BaseRepository):
    table_name = "bookings"
    entity_name = "Booking"

    # ============================================================
    # Booking creation
    # ============================================================

    async def count_covering(self, gym_id: str, booking_date: date, hour: time, conn=None) -> int:
        """Bookings holding a place at `hour` (start <= hour < end)."""
        return await self._fetchval(
            """
            SELECT COUNT(*) FROM bookings
            WHERE gym_id = $1 AND booking_date = $2
              AND start_time <= $3 AND end_time > $3
              AND status = ANY($4::text[])
            """,
            gym_id, booking_date, hour, list(CAPACITY_STATUSES),
            conn=conn,
            operation="count_covering",
        ) or 0

    async def get_for_user(self, booking_id: str, user_id: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT * FROM bookings WHERE id = $1 AND user_id = $2",
            booking_id, user_id,
            conn=conn,
            operation="get_for_user",
        )

    async def get_detail_for_user(self, booking_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT b.*, g.name AS gym_name, g.address, g.city,
                   s.name AS service_name,
                   COALESCE(tu.name, t.name) AS trainer_name
            FROM bookings b
            JOIN gyms g ON b.gym_id = g.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            LEFT JOIN trainers t ON b.trainer_id = t.id
            LEFT JOIN users tu ON t.user_id = tu.id
            WHERE b.id = $1 AND b.user_id = $2
            """,
            booking_id, user_id,
            operation="get_detail_for_user",
        )

    async def mark_paid(self, booking_id: str, payment_id: str, conn=None) -> Optional[Dict[str, Any]]:
        """None when the booking was already paid."""
        return await self._fetchrow(
            """
            UPDATE bookings SET payment_status = 'completed', payment_id = $2, updated_at = NOW()
            WHERE id = $1 AND payment_status IS DISTINCT FROM 'completed'
            RETURNING *
            """,
            booking_id, payment_id,
            conn=conn,
            operation="mark_paid",
        )

    async def get_notification_details(self, booking_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT b.booking_date, b.start_time, b.duration_hours AS duration, b.total_amount,
                   u.name AS customer_name, u.phone AS customer_phone,
                   s.name AS service_name,
                   COALESCE(tu.name, t.name) AS trainer_name
            FROM bookings b
            JOIN users u ON b.user_id = u.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            LEFT JOIN trainers t ON b.trainer_id = t.id
            LEFT JOIN users tu ON t.user_id = tu.id
            WHERE b.id = $1
            """,
            booking_id,
            operation="get_notification_details",
        )

    async def cancel_confirmed_for_user(self, booking_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE bookings SET status = 'cancelled', updated_at = NOW()
            WHERE id = $1 AND user_id = $2 AND status = 'confirmed'
            RETURNING *
            """,
            booking_id, user_id,
            operation="cancel_confirmed_for_user",
        )

    # ============================================================
    # Entry passes
    # ============================================================

    async def find_pass(
        self,
        qr_code: Optional[str] = None,
        booking_id: Optional[str] = None,
        gym_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Booking by QR token or id, optionally restricted to one gym."""
        clauses = []
        params: List[Any] = []
        if qr_code:
            params.append(qr_code)
            clauses.append(f"b.qr_code = ${len(params)}")
        else:
            params.append(booking_id)
            clauses.append(f"b.id = ${len(params)}")
        if gym_id:
            params.append(gym_id)
            clauses.append(f"b.gym_id = ${len(params)}")

        return await self._fetchrow(
            f"""
            SELECT b.*, u.name AS user_name, u.phone AS user_phone,
                   g.name AS gym_name, s.name AS service_name
            FROM bookings b
            JOIN users u ON b.user_id = u.id
            JOIN gyms g ON b.gym_id = g.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            WHERE {' AND '.join(clauses)}
            """,
            *params,
            operation="find_pass",
        )

    async def consume_session(self, booking_id: str, remaining: int) -> Optional[Dict[str, Any]]:
        """
        Take one session off a pass that still holds `remaining` sessions.

        None means the pass stopped qualifying, usually because another scan
        changed it first.
        """
        return await self._fetchrow(
            """
            UPDATE bookings
            SET remaining_sessions = remaining_sessions - 1, used_at = NOW(), updated_at = NOW()
            WHERE id = $1 AND status NOT IN ('used', 'cancelled') AND payment_status = 'completed'
              AND COALESCE(remaining_sessions, 1) = $2
            RETURNING *
            """,
            booking_id, remaining,
            operation="consume_session",
        )

    async def mark_used(self, booking_id: str, remaining: int) -> Optional[Dict[str, Any]]:
        """Spend the last session; same guard as consume_session."""
        return await self._fetchrow(
            """
            UPDATE bookings
            SET status = 'used', remaining_sessions = 0, used_at = NOW(), updated_at = NOW()
            WHERE id = $1 AND status NOT IN ('used', 'cancelled') AND payment_status = 'completed'
              AND COALESCE(remaining_sessions, 1) = $2
            RETURNING *
            """,
            booking_id, remaining,
            operation="mark_used",
        )

    # ============================================================
    # Member views
    # ============================================================

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT b.*, g.name AS gym_name, g.address, g.images,
                   s.name AS service_name, 'gym' AS type
            FROM bookings b
            JOIN gyms g ON b.gym_id = g.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            WHERE b.user_id = $1
            ORDER BY b.created_at DESC
            """,
            user_id,
            operation="list_for_user",
        )

    async def next_confirmed_for_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            SELECT b.*, g.name AS gym_name, g.address, g.images,
                   s.name AS service_name, 'gym' AS type
            FROM bookings b
            JOIN gyms g ON b.gym_id = g.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            WHERE b.user_id = $1 AND b.status = 'confirmed'
              AND (b.booking_date > CURRENT_DATE
                   OR (b.booking_date = CURRENT_DATE
                       AND (b.start_time IS NULL OR b.start_time > CURRENT_TIME)))
            ORDER BY b.booking_date ASC, b.start_time ASC NULLS FIRST
            LIMIT 1
            """,
            user_id,
            operation="next_confirmed_for_user",
        )

    async def attendance_summary(self, user_id: str) -> Dict[str, Any]:
        """
        Workout counters over both booking kinds.

        Returns:
            Dict with total_workouts, visited_gyms and dates (distinct
            attended or confirmed booking dates up to today)
        """
        attended = list(ATTENDED_STATUSES)
        active = list(ACTIVE_STATUSES)

        total = await self._fetchval(
            """
            SELECT (SELECT COUNT(*) FROM bookings WHERE user_id = $1 AND status = ANY($2::text[]))
                 + (SELECT COUNT(*) FROM trainer_bookings WHERE user_id = $1 AND status = ANY($2::text[]))
            """,
            user_id, attended,
            operation="attendance_summary",
        )
        visited = await self._fetchval(
            """
            SELECT COUNT(DISTINCT gym_id) FROM (
                SELECT gym_id FROM bookings WHERE user_id = $1 AND status = ANY($2::text[])
                UNION
                SELECT gym_id FROM trainer_bookings
                WHERE user_id = $1 AND status = ANY($2::text[]) AND gym_id IS NOT NULL
            ) AS visits
            """,
            user_id, active,
            operation="attendance_summary",
        )
        rows = await self._fetch(
            """
            SELECT DISTINCT booking_date FROM (
                SELECT booking_date FROM bookings
                WHERE user_id = $1 AND status = ANY($2::text[]) AND booking_date <= CURRENT_DATE
                UNION
                SELECT booking_date FROM trainer_bookings
                WHERE user_id = $1 AND status = ANY($2::text[]) AND booking_date <= CURRENT_DATE
            ) AS days
            ORDER BY booking_date DESC
            """,
            user_id, active,
            operation="attendance_summary",
        )
        return {
            "total_workouts": total or 0,
            "visited_gyms": visited or 0,
            "dates": [row["booking_date"] for row in rows],
        }

    async def first_reviewable(self, gym_id: str, user_id: str) -> Optional[str]:
        """First used booking of the user at this gym that has no review yet."""
        return await self._fetchval(
            """
            SELECT b.id FROM bookings b
            WHERE b.gym_id = $1 AND b.user_id = $2 AND b.status = 'used'
              AND NOT EXISTS (SELECT 1 FROM reviews r WHERE r.booking_id = b.id)
            ORDER BY b.booking_date
            LIMIT 1
            """,
            gym_id, user_id,
            operation="first_reviewable",
        )

    # ============================================================
    # Gym owner dashboard
    # ============================================================

    async def list_for_gym(self, gym_id: str, status: Optional[str] = None, booking_date: Optional[date] = None) -> List[Dict[str, Any]]:
        clauses = ["b.gym_id = $1"]
        params: List[Any] = [gym_id]
        if status:
            params.append(status)
            clauses.append(f"b.status = ${len(params)}")
        if booking_date:
            params.append(booking_date)
            clauses.append(f"b.booking_date = ${len(params)}")
        return await self._fetch(
            f"""
            SELECT b.*, u.name AS user_name, u.phone AS user_phone,
                   s.name AS service_name, 'gym' AS type
            FROM bookings b
            JOIN users u ON b.user_id = u.id
            LEFT JOIN gym_services s ON b.service_id = s.id
            WHERE {' AND '.join(clauses)}
            """,
            *params,
            operation="list_for_gym",
        )

    async def gym_dashboard_counters(self, gym_id: str) -> Dict[str, Any]:
        row = await self._fetchrow(
            """
            SELECT
                (SELECT COUNT(*) FROM bookings WHERE gym_id = $1)
                  + (SELECT COUNT(*) FROM trainer_bookings WHERE gym_id = $1) AS total_bookings,
                (SELECT COUNT(DISTINCT user_id) FROM (
                    SELECT user_id FROM bookings
                    WHERE gym_id = $1 AND created_at > NOW() - INTERVAL '30 days'
                    UNION
                    SELECT user_id FROM trainer_bookings
                    WHERE gym_id = $1 AND created_at > NOW() - INTERVAL '30 days'
                ) AS members) AS active_members,
                (SELECT COALESCE(SUM(gym_earnings), 0) FROM bookings
                 WHERE gym_id = $1 AND payment_status = 'completed') AS total_revenue
            """,
            gym_id,
            operation="gym_dashboard_counters",
        )
        return row or {"total_bookings": 0, "active_members": 0, "total_revenue": 0}

    # ============================================================
    # Platform admin
    # ============================================================

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT b.*, u.name AS user_name, g.name AS gym_name
            FROM bookings b
            JOIN users u ON b.user_id = u.id
            JOIN gyms g ON b.gym_id = g.id
            ORDER BY b.created_at DESC
            """,
            operation="list_all",
        )

    async def cancel(self, booking_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "UPDATE bookings SET status = 'cancelled', updated_at = NOW() WHERE id = $1 RETURNING *",
            booking_id,
            operation="cancel",
        )

    async def count_all(self) -> int:
        return await self._fetchval("SELECT COUNT(*) FROM bookings", operation="count_all") or 0
