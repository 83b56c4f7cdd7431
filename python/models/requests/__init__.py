"""
Request DTOs - API input models.
Used for validating incoming API requests.
"""

from models.requests.users import ProfileUpdateRequest, MetricsRequest, RoleUpdateRequest
from models.requests.gyms import GymCreateRequest, GymUpdateRequest
from models.requests.bookings import (
    BookingCreateRequest,
    PaymentVerifyRequest,
    PassVerifyRequest,
    TrainerBookingCreateRequest,
)
from models.requests.reviews import ReviewCreateRequest
from models.requests.monetization import (
    FeaturedOrderRequest,
    FeaturedVerifyRequest,
    PremiumOrderRequest,
    PremiumVerifyRequest,
)
from models.requests.common import PaginationParams

__all__ = [
    # Users
    'ProfileUpdateRequest',
    'MetricsRequest',
    'RoleUpdateRequest',
    # Gyms
    'GymCreateRequest',
    'GymUpdateRequest',
    # Bookings
    'BookingCreateRequest',
    'PaymentVerifyRequest',
    'PassVerifyRequest',
    'TrainerBookingCreateRequest',
    # Reviews
    'ReviewCreateRequest',
    # Monetization
    'FeaturedOrderRequest',
    'FeaturedVerifyRequest',
    'PremiumOrderRequest',
    'PremiumVerifyRequest',
    # Common
    'PaginationParams',
]
