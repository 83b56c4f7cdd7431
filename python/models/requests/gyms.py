"""
Gym request models.
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class GymCreateRequest(BaseModel):
    """Gym registration. Name, address, city and one category are required."""

    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = None
    email: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    facilities: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)


class GymUpdateRequest(BaseModel):
    """Partial gym update."""

    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    phone: Optional[str] = None
    email: Optional[str] = None
    images: Optional[List[str]] = None
    videos: Optional[List[str]] = None
    facilities: Optional[List[str]] = None
    categories: Optional[List[str]] = None
