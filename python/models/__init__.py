"""
Models package - data structures for the application.

Subpackages:
- domain/ - Enumerated business vocabulary
- requests/ - Request DTOs (API input)
"""

from models.domain.enums import (
    UserRole,
    ServiceType,
    BookingStatus,
    PaymentStatus,
)

__all__ = [
    'UserRole',
    'ServiceType',
    'BookingStatus',
    'PaymentStatus',
]
