from typing import Any, Dict, List

from core.exceptions import NotFoundError


class ContentService:
    """Public reads of home banners and static pages."""

    def __init__(self, repos):
        self.repos = repos

    async def active_banners(self) -> List[Dict[str, Any]]:
        return await self.repos.banners.list_active()

    async def get_page(self, slug: str) -> Dict[str, Any]:
        page = await self.repos.pages.get_by_slug(slug)
        if page is None:
            raise NotFoundError("Page", slug)
        return page
