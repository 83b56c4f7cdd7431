"""
Auth Router Package
Identity comes from the external provider; these endpoints expose the
synced local account.
"""

from fastapi import APIRouter
from .account import router as account_router, set_services

router = APIRouter()
router.include_router(account_router)

__all__ = ["router", "set_services"]
