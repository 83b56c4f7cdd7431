"""
Dependency injection for super admin endpoints.
"""

from services.platform_admin_service import PlatformAdminService

# Set by main.py on startup
platform_admin_service_instance: PlatformAdminService = None


def set_services(platform_admin_service: PlatformAdminService):
    global platform_admin_service_instance
    platform_admin_service_instance = platform_admin_service


def get_platform_admin_service() -> PlatformAdminService:
    if platform_admin_service_instance is None:
        raise RuntimeError("PlatformAdminService not initialized. Check server startup logs.")
    return platform_admin_service_instance
