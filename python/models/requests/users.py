"""
Member request models: profile, body metrics.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    """Partial profile update. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)
    fitness_interests: Optional[List[str]] = None
    profile_image: Optional[str] = None


class MetricsRequest(BaseModel):
    """Body metrics entry. Weight in kg, height in cm."""

    weight: Optional[float] = None
    height: Optional[float] = None


class RoleUpdateRequest(BaseModel):
    role: str = Field(..., description="user, gym_owner or trainer")
