"""
Dashboard request models for gym owners and platform admins.

Action-style endpoints take {action, <id>, <payload>} like the SPA sends.
"""

from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field


# ============================================================
# Gym owner
# ============================================================

class ServiceData(BaseModel):
    service_type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_value: Optional[int] = Field(None, ge=1)
    duration_unit: Optional[str] = None
    session_count: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class ManageServiceRequest(BaseModel):
    action: str
    service_id: Optional[str] = None
    service_data: ServiceData = Field(default_factory=ServiceData)


class SlotData(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_capacity: int = Field(20, ge=1)


class ManageSlotRequest(BaseModel):
    action: str
    slot_id: Optional[str] = None
    slot_data: SlotData = Field(default_factory=SlotData)


class AvailabilityData(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ManageAvailabilityRequest(BaseModel):
    action: str
    trainer_id: Optional[str] = None
    availability_id: Optional[str] = None
    availability_data: AvailabilityData = Field(default_factory=AvailabilityData)


class FeaturedPackageRequest(BaseModel):
    package_type: Optional[str] = None
    duration_days: int = Field(30, ge=1, le=365)


# ============================================================
# Platform admin
# ============================================================

class UserStatusRequest(BaseModel):
    is_active: bool


class GymStatusRequest(BaseModel):
    is_approved: bool


class GymFeaturedRequest(BaseModel):
    is_featured: bool


class TrainerStatusRequest(BaseModel):
    is_active: bool


class AssignTrainerRequest(BaseModel):
    user_id: str
    gym_id: str
    bio: Optional[str] = None
    specializations: Optional[List[str]] = None
    experience_years: Optional[int] = Field(None, ge=0)
    certifications: Optional[List[str]] = None
    hourly_rate: Optional[float] = Field(None, ge=0)


class PayoutUpdateRequest(BaseModel):
    status: str
    transaction_id: Optional[str] = None


class BroadcastRequest(BaseModel):
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: str = "system"


class BannerData(BaseModel):
    image_url: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    link_url: Optional[str] = None
    order_index: int = 0


class ManageBannerRequest(BaseModel):
    action: str
    banner_id: Optional[str] = None
    banner_data: BannerData = Field(default_factory=BannerData)


class StaticPageUpdateRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class AdCreateRequest(BaseModel):
    gym_id: str
    type: str
    pricing: float = Field(0, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
