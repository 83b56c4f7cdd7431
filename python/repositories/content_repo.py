"""
Platform content: system settings, notifications, banners, static pages, ads.
"""

from typing import Optional, List, Dict, Any

from repositories.base import BaseRepository


class SettingsRepository(BaseRepository):
    table_name = "system_settings"

    async def get_all(self) -> Dict[str, str]:
        rows = await self._fetch("SELECT key, value FROM system_settings", operation="get_all")
        return {row["key"]: row["value"] for row in rows}

    async def get_value(self, key: str) -> Optional[str]:
        return await self._fetchval(
            "SELECT value FROM system_settings WHERE key = $1",
            key,
            operation="get_value",
        )

    async def upsert_many(self, values: Dict[str, Any]) -> None:
        async with self.db.transaction() as conn:
            for key, value in values.items():
                await self._execute(
                    """
                    INSERT INTO system_settings (key, value) VALUES ($1, $2)
                    ON CONFLICT (key) DO UPDATE SET value = $2, updated_at = NOW()
                    """,
                    key, None if value is None else str(value),
                    conn=conn,
                    operation="upsert_many",
                )


class NotificationsRepository(BaseRepository):
    table_name = "notifications"

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """The user's own notifications plus broadcasts (user_id NULL)."""
        return await self._fetch(
            """
            SELECT * FROM notifications
            WHERE user_id = $1 OR user_id IS NULL
            ORDER BY created_at DESC
            """,
            user_id,
            operation="list_for_user",
        )

    async def broadcast(self, title: str, message: str, type: str = "system") -> Dict[str, Any]:
        return await self.insert({"title": title, "message": message, "type": type})


class BannersRepository(BaseRepository):
    table_name = "home_banners"
    entity_name = "Banner"

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM home_banners ORDER BY order_index ASC",
            operation="list_all",
        )

    async def list_active(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT * FROM home_banners WHERE is_active = true ORDER BY order_index ASC",
            operation="list_active",
        )


class StaticPagesRepository(BaseRepository):
    table_name = "static_pages"
    entity_name = "Page"

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            "SELECT slug, title, content, last_updated_at FROM static_pages ORDER BY slug",
            operation="list_all",
        )

    async def get_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            "SELECT slug, title, content, last_updated_at FROM static_pages WHERE slug = $1",
            slug,
            operation="get_by_slug",
        )

    async def update_by_slug(self, slug: str, title: Optional[str], content: Optional[str]) -> Optional[Dict[str, Any]]:
        return await self._fetchrow(
            """
            UPDATE static_pages
            SET title = COALESCE($2, title), content = COALESCE($3, content), last_updated_at = NOW()
            WHERE slug = $1
            RETURNING *
            """,
            slug, title, content,
            operation="update_by_slug",
        )


class AdsRepository(BaseRepository):
    table_name = "ads_promotions"
    entity_name = "Ad"

    async def list_performance(self) -> List[Dict[str, Any]]:
        return await self._fetch(
            """
            SELECT a.*, g.name AS gym_name,
                   CASE WHEN a.impressions > 0
                        THEN ROUND(a.clicks::numeric * 100 / a.impressions, 2)
                        ELSE 0 END AS ctr
            FROM ads_promotions a
            JOIN gyms g ON a.gym_id = g.id
            ORDER BY a.created_at DESC
            """,
            operation="list_performance",
        )
