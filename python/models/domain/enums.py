"""
Domain enumerations shared by services, repositories and request models.
"""

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    GYM_OWNER = "gym_owner"
    TRAINER = "trainer"
    ADMIN = "admin"


# Roles a user may pick for themselves
SELF_ASSIGNABLE_ROLES = (UserRole.USER, UserRole.GYM_OWNER, UserRole.TRAINER)


class ServiceType(str, Enum):
    """What a gym sells."""
    SESSION = "session"        # hourly, slot-bound
    PASS = "pass"              # day pass, counted in days
    MEMBERSHIP = "membership"  # long-term access


class DurationUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


DAYS_PER_UNIT = {
    DurationUnit.DAY: 1,
    DurationUnit.MONTH: 30,
    DurationUnit.YEAR: 365,
}


class BookingStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    USED = "used"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class TransactionType(str, Enum):
    BOOKING = "booking"
    TRAINER_BOOKING = "trainer_booking"
    FEATURED_LISTING = "featured_listing"
    TRAINER_PREMIUM = "trainer_premium"


class FeaturedPackage(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    PLATINUM = "platinum"
    STANDARD = "standard"  # pay-per-day listing bought through monetization


FEATURED_PACKAGE_PRICES = {
    FeaturedPackage.BASIC: 999.0,
    FeaturedPackage.PREMIUM: 2499.0,
    FeaturedPackage.PLATINUM: 4999.0,
}


# Booking states that occupy capacity in a slot
CAPACITY_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)

# Booking states that count towards workouts and streaks
ATTENDED_STATUSES = (BookingStatus.COMPLETED.value, BookingStatus.USED.value)
ACTIVE_STATUSES = ATTENDED_STATUSES + (BookingStatus.CONFIRMED.value,)
