"""
Super Admin Router Package - platform administration (role admin)

Structure:
- accounts.py: /stats, /users, /gyms, /trainers
- finance.py: /bookings, /financials, /transactions, /payouts
- platform.py: /settings, /notifications/broadcast, /banners, /static-pages, /ads
"""

from fastapi import APIRouter, Depends

from services.auth import require_admin
from .dependencies import set_services
from .accounts import router as accounts_router
from .finance import router as finance_router
from .platform import router as platform_router

router = APIRouter(dependencies=[Depends(require_admin)])
router.include_router(accounts_router)
router.include_router(finance_router)
router.include_router(platform_router)

__all__ = ["router", "set_services"]
