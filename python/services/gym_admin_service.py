"""
Gym owner dashboard.

Every operation works on "my gym": the gym owned by the calling user.
"""

import json
import time as clock
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple, Union

from core.exceptions import (
    BadRequestError,
    InvalidActionError,
    NotFoundError,
    OwnedGymNotFoundError,
    ServiceNotFoundError,
    SlotOverlapError,
    TrainerNotFoundError,
)
from core.logging import get_logger
from infrastructure.minio_storage import check_upload
from models.domain.enums import DAYS_PER_UNIT, DurationUnit, ServiceType
from services.pricing import featured_package_price, to_paise
from services.scheduling import parse_time, sortable_stamp, utcnow

logger = get_logger(__name__)

# (bytes, filename, content type)
UploadPart = Tuple[bytes, str, str]

TRAINER_PROFILE_FOLDER = "trainers/profiles"
TRAINER_VIDEO_FOLDER = "trainers/videos"


def duration_columns(value: Optional[int], unit: Optional[str]) -> Dict[str, Optional[int]]:
    """
    Map a (value, unit) duration onto gym_services columns.

    hour -> duration_hours; day/month/year -> duration_days (1/30/365 per unit).
    """
    if not value or not unit:
        return {"duration_hours": None, "duration_days": None}
    try:
        unit_enum = DurationUnit(unit)
    except ValueError:
        raise BadRequestError(f"Unknown duration unit: {unit}")
    if unit_enum == DurationUnit.HOUR:
        return {"duration_hours": value, "duration_days": None}
    return {"duration_hours": None, "duration_days": value * DAYS_PER_UNIT[unit_enum]}


def split_list(value: Union[None, str, List[str]]) -> Optional[List[str]]:
    """Accept a list or a comma separated string."""
    if value is None:
        return None
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


def parse_trainer_data(raw: Union[None, str, Dict[str, Any]]) -> Dict[str, Any]:
    """trainer_data arrives as a JSON string inside multipart forms."""
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise BadRequestError("trainer_data must be valid JSON")
    if not isinstance(data, dict):
        raise BadRequestError("trainer_data must be a JSON object")
    return data


def trainer_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": data.get("name"),
        "bio": data.get("bio"),
        "specializations": split_list(data.get("specializations")),
        "certifications": split_list(data.get("certifications")),
        "experience_years": data.get("experience_years"),
        "hourly_rate": data.get("hourly_rate"),
        "profile_image": data.get("profile_image_url") or data.get("profileImageUrl"),
        "intro_video": data.get("intro_video_url") or data.get("introVideoUrl"),
    }


def merge_gym_bookings(gym_bookings: List[Dict[str, Any]], trainer_bookings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    merged = list(gym_bookings) + list(trainer_bookings)
    merged.sort(key=lambda b: (sortable_stamp(b.get("booking_date")), sortable_stamp(b.get("created_at"))), reverse=True)
    return merged


class GymAdminService:
    def __init__(self, repos, razorpay, storage, bookings_service):
        self.repos = repos
        self.razorpay = razorpay
        self.storage = storage
        self.bookings_service = bookings_service

    async def my_gym(self, user: Dict[str, Any]) -> Dict[str, Any]:
        gym = await self.repos.gyms.get_by_owner(user["id"])
        if gym is None:
            raise OwnedGymNotFoundError()
        return gym

    # ============================================================
    # Overview
    # ============================================================

    async def get_stats(self, user: Dict[str, Any]) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        counters = await self.repos.bookings.gym_dashboard_counters(gym["id"])
        reviews = await self.repos.reviews.aggregate_for_gym(gym["id"])
        return {
            "gym_id": gym["id"],
            "total_bookings": int(counters["total_bookings"] or 0),
            "active_members": int(counters["active_members"] or 0),
            "total_revenue": float(counters["total_revenue"] or 0),
            "average_rating": round(float(reviews["average"] or 0), 2),
            "total_reviews": int(reviews["total"] or 0),
            "active_slots": await self.repos.slots.count_active(gym["id"]),
        }

    async def get_profile(self, user: Dict[str, Any]) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        return {
            "gym": gym,
            "services": await self.repos.services.list_for_gym(gym["id"]),
            "slots": await self.repos.slots.list_for_gym(gym["id"]),
        }

    async def update_profile(self, user: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        return await self.repos.gyms.update_profile(gym["id"], data)

    async def list_bookings(
        self,
        user: Dict[str, Any],
        status: Optional[str] = None,
        booking_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        gym = await self.my_gym(user)
        gym_bookings = await self.repos.bookings.list_for_gym(gym["id"], status, booking_date)
        trainer_bookings = await self.repos.trainer_bookings.list_for_gym(gym["id"], status, booking_date)
        return merge_gym_bookings(gym_bookings, trainer_bookings)

    # ============================================================
    # Services on sale
    # ============================================================

    async def manage_service(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        data = request.service_data

        if request.action == "create":
            missing = [f for f in ("service_type", "name") if not getattr(data, f)]
            if data.price is None:
                missing.append("price")
            if missing:
                raise BadRequestError(f"Missing required fields: {', '.join(missing)}", details={"fields": missing})
            if data.service_type not in {t.value for t in ServiceType}:
                raise BadRequestError(f"Unknown service type: {data.service_type}")

            service = await self.repos.services.insert({
                "gym_id": gym["id"],
                "service_type": data.service_type,
                "name": data.name,
                "description": data.description,
                "price": data.price,
                "session_count": data.session_count,
                **duration_columns(data.duration_value, data.duration_unit),
            })
            logger.info(f"Service {service['id']} created for gym {gym['id']}")
            return {"message": "Service created", "service": service}

        if request.action == "update":
            service = await self.repos.services.update_for_gym(request.service_id, gym["id"], {
                "name": data.name,
                "description": data.description,
                "price": data.price,
                "is_active": data.is_active,
            })
            if service is None:
                raise ServiceNotFoundError(request.service_id)
            return {"message": "Service updated", "service": service}

        if request.action == "delete":
            if not await self.repos.services.delete_for_gym(request.service_id, gym["id"]):
                raise ServiceNotFoundError(request.service_id)
            return {"message": "Service deleted"}

        raise InvalidActionError(request.action)

    # ============================================================
    # Featured packages
    # ============================================================

    async def buy_featured_package(self, user: Dict[str, Any], package_type: Optional[str], duration_days: int = 30) -> Dict[str, Any]:
        """Open an order for a fixed-price package and book the listing against it."""
        gym = await self.my_gym(user)
        package, amount = featured_package_price(package_type)
        start = utcnow()
        end = start + timedelta(days=duration_days or 30)

        async with self.repos.db.transaction() as conn:
            order = await self.razorpay.create_order(
                to_paise(amount),
                f"featured_{int(clock.time() * 1000)}",
                notes={"gym_id": gym["id"], "package": package.value},
            )
            listing = await self.repos.featured.create(
                gym["id"], package.value, amount, start, end, order["id"], conn=conn
            )

        return {
            "message": "Featured listing created",
            "listing": listing,
            "razorpay_order_id": order["id"],
            "razorpay_key_id": self.razorpay.key_id,
        }

    # ============================================================
    # Time slots
    # ============================================================

    async def list_slots(self, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        gym = await self.my_gym(user)
        return await self.repos.slots.list_for_gym(gym["id"])

    async def manage_slot(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        data = request.slot_data

        if request.action == "create":
            if data.day_of_week is None:
                raise BadRequestError("day_of_week is required")
            start = parse_time(data.start_time, "start_time")
            end = parse_time(data.end_time, "end_time")
            if start >= end:
                raise BadRequestError("Start time must be before end time")

            if await self.repos.slots.find_overlapping(gym["id"], data.day_of_week, start, end):
                raise SlotOverlapError()

            slot = await self.repos.slots.insert({
                "gym_id": gym["id"],
                "day_of_week": data.day_of_week,
                "start_time": start,
                "end_time": end,
                "max_capacity": data.max_capacity or 20,
            })
            return {"message": "Slot created", "slot": slot}

        if request.action == "delete":
            if not await self.repos.slots.delete_for_gym(request.slot_id, gym["id"]):
                raise NotFoundError("Slot", request.slot_id)
            return {"message": "Slot deleted"}

        raise InvalidActionError(request.action)

    # ============================================================
    # Trainers
    # ============================================================

    async def list_trainers(self, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        gym = await self.my_gym(user)
        return await self.repos.trainers.list_for_gym(gym["id"])

    async def _store_media(self, part: Optional[UploadPart], kind: str, folder: str) -> Optional[str]:
        if part is None:
            return None
        content, filename, content_type = part
        check_upload(content, content_type, kind=kind)
        stored = await self.storage.upload(content, filename, content_type, folder=folder)
        return stored["url"]

    async def manage_trainer(
        self,
        user: Dict[str, Any],
        action: str,
        trainer_id: Optional[str] = None,
        trainer_data: Union[None, str, Dict[str, Any]] = None,
        profile_image: Optional[UploadPart] = None,
        intro_video: Optional[UploadPart] = None,
    ) -> Dict[str, Any]:
        gym = await self.my_gym(user)

        if action == "delete":
            if not await self.repos.trainers.delete_for_gym(trainer_id, gym["id"]):
                raise TrainerNotFoundError(trainer_id)
            return {"message": "Trainer removed"}

        if action not in ("create", "update"):
            raise InvalidActionError(action)

        fields = trainer_fields(parse_trainer_data(trainer_data))
        image_url = await self._store_media(profile_image, "image", TRAINER_PROFILE_FOLDER)
        video_url = await self._store_media(intro_video, "video", TRAINER_VIDEO_FOLDER)
        if image_url:
            fields["profile_image"] = image_url
        if video_url:
            fields["intro_video"] = video_url

        if action == "create":
            if not fields.get("name"):
                raise BadRequestError("Trainer name is required")
            trainer = await self.repos.trainers.create_for_gym(gym["id"], fields)
            logger.info(f"Trainer {trainer['id']} added to gym {gym['id']}")
            return {"message": "Trainer added", "trainer": trainer}

        trainer = await self.repos.trainers.update_for_gym(trainer_id, gym["id"], fields)
        if trainer is None:
            raise TrainerNotFoundError(trainer_id)
        return {"message": "Trainer updated", "trainer": trainer}

    # ============================================================
    # Trainer availability
    # ============================================================

    async def _my_trainer(self, gym_id: str, trainer_id: Optional[str]) -> Dict[str, Any]:
        trainer = await self.repos.trainers.get_for_gym(trainer_id, gym_id) if trainer_id else None
        if trainer is None:
            raise NotFoundError("Trainer", message="Trainer not found in your gym")
        return trainer

    async def list_availability(self, user: Dict[str, Any], trainer_id: str) -> List[Dict[str, Any]]:
        gym = await self.my_gym(user)
        await self._my_trainer(gym["id"], trainer_id)
        return await self.repos.availability.list_for_trainer(trainer_id)

    async def manage_availability(self, user: Dict[str, Any], request) -> Dict[str, Any]:
        gym = await self.my_gym(user)

        if request.action == "create":
            await self._my_trainer(gym["id"], request.trainer_id)
            data = request.availability_data
            if data.day_of_week is None:
                raise BadRequestError("day_of_week is required")
            start = parse_time(data.start_time, "start_time")
            end = parse_time(data.end_time, "end_time")
            if start >= end:
                raise BadRequestError("Start time must be before end time")

            if await self.repos.availability.find_overlapping(request.trainer_id, data.day_of_week, start, end):
                raise SlotOverlapError("Availability overlaps with an existing time range")

            availability = await self.repos.availability.insert({
                "trainer_id": request.trainer_id,
                "day_of_week": data.day_of_week,
                "start_time": start,
                "end_time": end,
            })
            return {"message": "Availability added", "availability": availability}

        if request.action == "delete":
            if not await self.repos.availability.delete_for_gym(request.availability_id, gym["id"]):
                raise NotFoundError("Availability", request.availability_id)
            return {"message": "Availability removed"}

        raise InvalidActionError(request.action)

    # ============================================================
    # Entry passes
    # ============================================================

    async def verify_booking(self, user: Dict[str, Any], qr_code: Optional[str], booking_id: Optional[str]) -> Dict[str, Any]:
        gym = await self.my_gym(user)
        return await self.bookings_service.verify_pass(qr_code=qr_code, booking_id=booking_id, gym_id=gym["id"])
