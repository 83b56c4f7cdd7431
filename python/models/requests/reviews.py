"""
Review request models.
"""

from typing import Optional
from pydantic import BaseModel


class ReviewCreateRequest(BaseModel):
    """
    A review of a gym or a trainer, tied to the booking it is based on.
    Range and presence checks happen in ReviewsService so they answer 400.
    """

    gym_id: Optional[str] = None
    trainer_id: Optional[str] = None
    booking_id: Optional[str] = None
    trainer_booking_id: Optional[str] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
