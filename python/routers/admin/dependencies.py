"""
Dependency injection for gym admin endpoints.
"""

from services.gym_admin_service import GymAdminService

# Set by main.py on startup
gym_admin_service_instance: GymAdminService = None


def set_services(gym_admin_service: GymAdminService):
    """
    Set the service instance. Called from main.py during startup.
    """
    global gym_admin_service_instance
    gym_admin_service_instance = gym_admin_service


def get_gym_admin_service() -> GymAdminService:
    """Dependency for FastAPI endpoints"""
    if gym_admin_service_instance is None:
        raise RuntimeError("GymAdminService not initialized. Check server startup logs.")
    return gym_admin_service_instance
