"""
Marketplace pricing.

Every amount is rounded to 2 decimals. Commission is a percent (10 = 10%).
Gateway amounts are integer paise.
"""

from typing import Optional, Tuple

from pydantic import BaseModel

from models.domain.enums import (
    FEATURED_PACKAGE_PRICES,
    FeaturedPackage,
    ServiceType,
)


class BookingPrice(BaseModel):
    """Split of a booking total between platform, gym and trainer."""

    total: float
    commission: float
    gym_earnings: float = 0.0
    trainer_earnings: float = 0.0


def money(amount: float) -> float:
    return round(float(amount), 2)


def to_paise(amount: float) -> int:
    """Rupees to the integer minor unit the gateway expects."""
    return int(round(float(amount) * 100))


def price_gym_booking(
    service_type: str,
    service_price: float,
    hours: int,
    commission_pct: float,
    trainer_rate: float = 0.0,
) -> BookingPrice:
    """
    Price a gym booking.

    Sessions are charged per hour and may include a trainer. Passes and
    memberships are flat-priced and never carry a trainer.
    """
    rate = commission_pct / 100
    is_session = service_type == ServiceType.SESSION.value

    if is_session:
        total = (float(service_price) + float(trainer_rate)) * hours
    else:
        total = float(service_price)
        trainer_rate = 0.0

    commission = total * rate

    if trainer_rate > 0:
        trainer_earnings = float(trainer_rate) * hours * (1 - rate)
        gym_earnings = total - commission - trainer_earnings
    else:
        trainer_earnings = 0.0
        gym_earnings = total - commission

    return BookingPrice(
        total=money(total),
        commission=money(commission),
        gym_earnings=money(gym_earnings),
        trainer_earnings=money(trainer_earnings),
    )


def price_trainer_booking(hourly_rate: float, hours: int, commission_pct: float) -> BookingPrice:
    """Direct trainer booking: the trainer keeps everything but commission."""
    total = float(hourly_rate) * hours
    commission = total * (commission_pct / 100)
    return BookingPrice(
        total=money(total),
        commission=money(commission),
        trainer_earnings=money(total - commission),
    )


def featured_package_price(package: Optional[str]) -> Tuple[FeaturedPackage, float]:
    """Resolve a featured package name; unknown names fall back to basic."""
    try:
        resolved = FeaturedPackage(package)
    except ValueError:
        resolved = FeaturedPackage.BASIC
    if resolved not in FEATURED_PACKAGE_PRICES:
        resolved = FeaturedPackage.BASIC
    return resolved, FEATURED_PACKAGE_PRICES[resolved]
