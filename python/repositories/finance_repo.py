"""
Money bookkeeping: transactions, payouts, featured listings, subscriptions.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository


class TransactionsRepository(BaseRepository):
    table_name = "transactions"
    entity_name = "Transaction"

    async def record(
        self,
        transaction_type: str,
        amount: float,
        payment_id: str,
        user_id: Optional[str] = None,
        gym_id: Optional[str] = None,
        platform_commission: float = 0,
        metadata: Optional[Dict[str, Any]] = None,
        conn=None,
    ) -> Dict[str, Any]:
        return await self.insert(
            {
                "user_id": user_id,
                "gym_id": gym_id,
                "transaction_type": transaction_type,
                "amount": amount,
                "platform_commission": platform_commission,
                "payment_gateway": "razorpay",
                "payment_id": payment_id,
                "payment_status": "completed",
                "metadata": metadata or {},
            },
            conn=conn,
        )

    async def exists_for_payment(self, payment_id: str) -> bool:
        found = await self._fetchval(
            "SELECT 1 FROM transactions WHERE payment_id = $1 LIMIT 1",
            payment_id,
            operation="exists_for_payment",
        )
        return found is not None

    async def list_recent(self, limit: int = 100) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT t.*, u.name AS user_name
            FROM transactions t
            LEFT JOIN users u ON t.user_id = u.id
            ORDER BY t.created_at DESC
            LIMIT $1
            """,
            limit,
            operation="list_recent",
        )

    async def platform_totals(self) -> Dict[str, float]:
        """Revenue split over gym bookings with a completed payment."""
        row = await self._fetchrow(
            """
            SELECT COALESCE(SUM(total_amount), 0) AS total_revenue,
                   COALESCE(SUM(platform_commission), 0) AS platform_commission,
                   COALESCE(SUM(gym_earnings), 0) AS gym_earnings
            FROM bookings
            WHERE payment_status = 'completed'
            """,
            operation="platform_totals",
        )
        return row or {"total_revenue": 0.0, "platform_commission": 0.0, "gym_earnings": 0.0}


class PayoutsRepository(BaseRepository):
    table_name = "payouts"
    entity_name = "Payout"

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT p.*, g.name AS gym_name
            FROM payouts p
            LEFT JOIN gyms g ON p.gym_id = g.id
            ORDER BY p.created_at DESC
            """,
            operation="list_all",
        )

    async def process(self, payout_id: str, status: str, transaction_id: Optional[str]) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE payouts SET status = $2, transaction_id = $3, processed_at = NOW()
            WHERE id = $1
            RETURNING *
            """,
            payout_id, status, transaction_id,
            operation="process",
        )

    async def pending_total(self) -> float:
        return await self._fetchval(
            "SELECT COALESCE(SUM(amount), 0) FROM payouts WHERE status = 'pending'",
            operation="pending_total",
        ) or 0.0


class FeaturedListingsRepository(BaseRepository):
    table_name = "featured_listings"
    entity_name = "Featured listing"

    async def create(
        self,
        gym_id: str,
        package_type: str,
        amount_paid: float,
        start_date: datetime,
        end_date: datetime,
        payment_id: str,
        conn=None,
    ) -> Dict[str, Any]:
        return await self.insert(
            {
                "gym_id": gym_id,
                "package_type": package_type,
                "amount_paid": amount_paid,
                "start_date": start_date,
                "end_date": end_date,
                "payment_id": payment_id,
            },
            conn=conn,
        )


class SubscriptionsRepository(BaseRepository):
    table_name = "gym_subscriptions"

    async def count_active(self) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM gym_subscriptions WHERE is_active = true",
            operation="count_active",
        ) or 0
