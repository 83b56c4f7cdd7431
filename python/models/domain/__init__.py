"""
Domain models - core business vocabulary.

These are the source of truth for enumerated values.
All other layers (requests, services, repositories) derive from these.
"""

from models.domain.enums import (
    UserRole,
    ServiceType,
    DurationUnit,
    BookingStatus,
    PaymentStatus,
    PayoutStatus,
    TransactionType,
    FeaturedPackage,
)

__all__ = [
    'UserRole',
    'ServiceType',
    'DurationUnit',
    'BookingStatus',
    'PaymentStatus',
    'PayoutStatus',
    'TransactionType',
    'FeaturedPackage',
]
