"""
Users repository: accounts, wishlist, body metrics.
"""

from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository

PROFILE_COLUMNS = (
    "id, auth_provider_id, email, phone, name, age, profile_image, role, "
    "fitness_interests, is_active, created_at"
)

PROFILE_UPDATABLE = ("name", "age", "fitness_interests", "profile_image")


class UsersRepository(BaseRepository):
    table_name = "users"
    entity_name = "User"

    async def get_by_provider_id(self, provider_id: str) -> Optional[Dict[str, Any]]:
        """Lookup regardless of active flag; callers decide what blocked means."""
        return await self._fetchrow(
            f"SELECT {PROFILE_COLUMNS} FROM users WHERE auth_provider_id = $1",
            provider_id,
            operation="get_by_provider_id",
        )

    async def get_active_by_provider_id(self, provider_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            f"SELECT {PROFILE_COLUMNS} FROM users WHERE auth_provider_id = $1 AND is_active = true",
            provider_id,
            operation="get_active_by_provider_id",
        )

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            f"SELECT {PROFILE_COLUMNS} FROM users WHERE id = $1",
            user_id,
            operation="get_profile",
        )

    async def create_from_identity(
        self,
        provider_id: str,
        email: Optional[str],
        phone: Optional[str],
        name: str,
        profile_image: Optional[str],
    ) -> Dict[str, Any]:
        """
        Insert the user for a provider id, or return the existing row when a
        parallel first request created it already.
        """
        return await self._fetchrow(
            f"""
            INSERT INTO users (auth_provider_id, email, phone, name, profile_image, is_verified, role)
            VALUES ($1, $2, $3, $4, $5, true, 'user')
            ON CONFLICT (auth_provider_id) DO UPDATE SET auth_provider_id = EXCLUDED.auth_provider_id
            RETURNING {PROFILE_COLUMNS}
            """,
            provider_id, email, phone, name, profile_image,
            operation="create_from_identity",
        )

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        await self.update(user_id, fields, allowed=PROFILE_UPDATABLE, touch=True)
        return await self.get_profile(user_id)

    async def set_role(self, user_id: str, role: str, conn=None) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            f"UPDATE users SET role = $2, updated_at = NOW() WHERE id = $1 RETURNING {PROFILE_COLUMNS}",
            user_id, role,
            conn=conn,
            operation="set_role",
        )

    async def promote_from_user(self, user_id: str, role: str, conn=None) -> None:
        """Raise a plain `user` to `role`; leaves any other role untouched."""
        await self._execute(
            "UPDATE users SET role = $2, updated_at = NOW() WHERE id = $1 AND role = 'user'",
            user_id, role,
            conn=conn,
            operation="promote_from_user",
        )

    async def set_active(self, user_id: str, is_active: bool) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "UPDATE users SET is_active = $2, updated_at = NOW() WHERE id = $1 RETURNING id, is_active",
            user_id, is_active,
            operation="set_active",
        )

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT id, name, email, phone, role, is_active, created_at FROM users ORDER BY created_at DESC",
            operation="list_all",
        )

    async def count_by_role(self, role: str) -> int:
        return await self._fetchval(
            "SELECT COUNT(*) FROM users WHERE role = $1",
            role,
            operation="count_by_role",
        ) or 0


class WishlistRepository(BaseRepository):
    table_name = "wishlist"

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT g.*, w.created_at AS added_at
            FROM wishlist w
            JOIN gyms g ON w.gym_id = g.id
            WHERE w.user_id = $1
            ORDER BY w.created_at DESC
            """,
            user_id,
            operation="list_for_user",
        )

    async def exists(self, user_id: str, gym_id: str) -> bool:
        found = await self._fetchval(
            "SELECT 1 FROM wishlist WHERE user_id = $1 AND gym_id = $2",
            user_id, gym_id,
            operation="exists",
        )
        return found is not None

    async def add(self, user_id: str, gym_id: str) -> Dict[str, Any]:
        return await self.insert({"user_id": user_id, "gym_id": gym_id})

    async def remove(self, user_id: str, gym_id: str) -> None:
        await self._execute(
            "DELETE FROM wishlist WHERE user_id = $1 AND gym_id = $2",
            user_id, gym_id,
            operation="remove",
        )


class UserMetricsRepository(BaseRepository):
    table_name = "user_metrics"

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM user_metrics WHERE user_id = $1 ORDER BY recorded_at DESC",
            user_id,
            operation="list_for_user",
        )

    async def record(self, user_id: str, weight: float, height: float, bmi: float) -> Dict[str, Any]:
        return await self.insert({
            "user_id": user_id,
            "weight": weight,
            "height": height,
            "bmi": bmi,
        })
