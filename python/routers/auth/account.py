"""
Current account endpoints.
- GET /me
- POST /update-role
"""

from fastapi import APIRouter, Depends

from core.responses import ApiResponse
from models.requests import RoleUpdateRequest
from services.auth import require_user
from services.users_service import UsersService

router = APIRouter()

users_service_instance: UsersService = None


def set_services(users_service: UsersService):
    global users_service_instance
    users_service_instance = users_service


def get_users_service() -> UsersService:
    if users_service_instance is None:
        raise RuntimeError("UsersService not initialized. Check server startup logs.")
    return users_service_instance


@router.get("/me")
async def get_me(user: dict = Depends(require_user)):
    """Verify the bearer token and return the synced user (created on first call)."""
    return ApiResponse.ok(user)


@router.post("/update-role")
async def update_role(
    request: RoleUpdateRequest,
    user: dict = Depends(require_user),
    users_service: UsersService = Depends(get_users_service),
):
    """Self-service role switch. `admin` can never be chosen here."""
    updated = await users_service.update_role(user["id"], request.role)
    return ApiResponse.ok(updated)
