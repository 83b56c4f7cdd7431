"""
Gym Admin Router Package - dashboard for gym owners

Every endpoint acts on the caller's own gym.

Structure:
- dashboard.py: /stats, /profile, /bookings, /verify-booking
- catalog.py: /services, /featured, /slots
- trainers.py: /trainers, /trainers/availability
"""

from fastapi import APIRouter

from .dependencies import set_services
from .dashboard import router as dashboard_router
from .catalog import router as catalog_router
from .trainers import router as trainers_router

router = APIRouter()
router.include_router(dashboard_router)
router.include_router(catalog_router)
router.include_router(trainers_router)

__all__ = ["router", "set_services"]
