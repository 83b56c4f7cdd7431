"""
System settings, broadcasts and CMS content.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from core.responses import ApiResponse
from models.requests.admin import (
    AdCreateRequest,
    BroadcastRequest,
    ManageBannerRequest,
    StaticPageUpdateRequest,
)
from services.platform_admin_service import PlatformAdminService
from .dependencies import get_platform_admin_service

router = APIRouter()


@router.get("/settings")
async def get_settings(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.get_settings())


@router.put("/settings")
async def update_settings(
    values: Dict[str, Any] = Body(...),
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    """Upsert every key in the body, e.g. {"platform_commission": "12"}."""
    return ApiResponse.ok(await service.update_settings(values))


@router.post("/notifications/broadcast", status_code=201)
async def broadcast(
    request: BroadcastRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    notification = await service.broadcast(request.title, request.message, request.type)
    return ApiResponse.ok(notification)


# ============================================================
# CMS
# ============================================================

@router.get("/banners")
async def list_banners(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_banners())


@router.post("/banners")
async def manage_banners(
    request: ManageBannerRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.manage_banner(request))


@router.get("/static-pages")
async def list_pages(service: PlatformAdminService = Depends(get_platform_admin_service)):
    return ApiResponse.ok(await service.list_pages())


@router.put("/static-pages/{slug}")
async def update_page(
    slug: str,
    request: StaticPageUpdateRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.update_page(slug, request.title, request.content))


@router.get("/ads/performance")
async def ads_performance(service: PlatformAdminService = Depends(get_platform_admin_service)):
    """Impressions, clicks and CTR per promotion."""
    return ApiResponse.ok(await service.ads_performance())


@router.post("/ads", status_code=201)
async def create_ad(
    request: AdCreateRequest,
    service: PlatformAdminService = Depends(get_platform_admin_service),
):
    return ApiResponse.ok(await service.create_ad(request))
