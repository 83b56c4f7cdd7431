"""
Gym Marketplace Booking API - Main Entry Point

This is the FastAPI application entry point.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from core.config import settings, VERSION
from core.exceptions import AppException
from core.responses import ApiResponse
from core.logging import setup_logging, get_logger, log_error

# Setup logging first
setup_logging(debug=settings.debug)
logger = get_logger(__name__)

from infrastructure import RazorpayClient, get_mailer, get_minio_storage
from middleware import RequestLoggingMiddleware
from repositories import Repositories
from services import auth
from services.database import db_client
from services.bookings_service import BookingsService
from services.content_service import ContentService
from services.gym_admin_service import GymAdminService
from services.gyms_service import GymsService
from services.monetization_service import MonetizationService
from services.platform_admin_service import PlatformAdminService
from services.platform_settings import PlatformSettings
from services.reviews_service import ReviewsService
from services.trainers_service import TrainersService
from services.users_service import UsersService

from routers import (
    auth as auth_router, users, gyms, bookings, trainers, reviews,
    monetization, admin, super_admin, content, uploads,
)

SERVICE_NAME = "gym-marketplace-api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_client.connect()
    logger.info(f"Application startup complete. Running on {settings.server_host}:{settings.server_port}")
    yield
    await db_client.disconnect()


# ============================================================
# Application Setup
# ============================================================

app = FastAPI(
    title="Gym Marketplace Booking API",
    description="Discover gyms and trainers, book sessions, passes and memberships",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# ============================================================
# Middleware
# ============================================================

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)

logger.info(f"CORS configured for {', '.join(settings.cors_origins)}")

# ============================================================
# Global Exception Handlers
# ============================================================

@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """
    Handle all custom AppException and subclasses.
    Returns unified ApiResponse format.
    """
    logger.warning(f"AppException: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse.from_exception(exc).model_dump(mode="json")
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body and query validation failures, in the same envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg')}" if field else (first.get("msg") or "Invalid request")
    return JSONResponse(
        status_code=422,
        content=ApiResponse(
            success=False,
            error=message,
            code="VALIDATION_ERROR",
            meta={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
        ).model_dump(mode="json")
    )

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.
    Logs full traceback and returns generic error.
    """
    log_error(logger, exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ApiResponse.fail(
            message="Internal server error",
            code="INTERNAL_ERROR"
        ).model_dump(mode="json")
    )

# ============================================================
# Service Initialization (Dependency Injection)
# ============================================================

logger.info(f"Starting Gym Marketplace API v{VERSION}")
logger.info("Creating singleton service instances...")

# 1. Data access and integrations
repos = Repositories(db_client)
razorpay = RazorpayClient()
mailer = get_mailer()
storage = get_minio_storage()
platform_settings = PlatformSettings(repos.settings)
if not razorpay.is_configured:
    logger.warning("Razorpay keys not configured; order creation will fail")
logger.info("✓ Created repositories and integration clients")

# 2. Domain services
users_service = UsersService(repos)
gyms_service = GymsService(repos)
bookings_service = BookingsService(repos, razorpay, mailer, platform_settings)
trainers_service = TrainersService(repos, razorpay, platform_settings)
reviews_service = ReviewsService(repos)
monetization_service = MonetizationService(repos, razorpay, platform_settings)
gym_admin_service = GymAdminService(repos, razorpay, storage, bookings_service)
platform_admin_service = PlatformAdminService(repos)
content_service = ContentService(repos)
logger.info("✓ Created domain services")

# 3. Inject services into routers
auth.set_services(repos.users)
auth_router.set_services(users_service)
users.set_services(users_service)
gyms.set_services(gyms_service)
bookings.set_services(bookings_service)
trainers.set_services(trainers_service)
reviews.set_services(reviews_service)
monetization.set_services(monetization_service)
admin.set_services(gym_admin_service)
super_admin.set_services(platform_admin_service)
content.set_services(content_service)
uploads.set_services(storage)
logger.info("✓ Service instances injected into all routers")

# ============================================================
# Root Endpoints
# ============================================================

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return ApiResponse.ok({
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": VERSION,
    })

# ============================================================
# Router Registration
# ============================================================

app.include_router(auth_router.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(gyms.router, prefix="/api/gyms", tags=["gyms"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["bookings"])
app.include_router(trainers.router, prefix="/api/trainers", tags=["trainers"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])
app.include_router(monetization.router, prefix="/api/monetization", tags=["monetization"])
app.include_router(admin.router, prefix="/api/admin/gym", tags=["gym-admin"])
app.include_router(super_admin.router, prefix="/api/super-admin", tags=["super-admin"])
app.include_router(content.router, prefix="/api/content", tags=["content"])
app.include_router(uploads.router, prefix="/api/uploads", tags=["uploads"])

# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
