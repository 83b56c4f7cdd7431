"""
Content API Router
Public CMS reads for the SPA home page and footer pages.
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from services.content_service import ContentService

router = APIRouter()

content_service_instance: ContentService = None


def set_services(content_service: ContentService):
    global content_service_instance
    content_service_instance = content_service


def get_content_service() -> ContentService:
    if content_service_instance is None:
        raise RuntimeError("ContentService not initialized. Check server startup logs.")
    return content_service_instance


@router.get("/banners")
async def get_banners(content_service: ContentService = Depends(get_content_service)):
    return ApiResponse.ok(await content_service.active_banners())


@router.get("/pages/{slug}")
async def get_page(slug: str, content_service: ContentService = Depends(get_content_service)):
    return ApiResponse.ok(await content_service.get_page(slug))
