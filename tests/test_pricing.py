from models.domain.enums import FeaturedPackage
from services.pricing import (
    featured_package_price,
    price_gym_booking,
    price_trainer_booking,
    to_paise,
)


def test_session_with_trainer_splits_three_ways():
    price = price_gym_booking("session", 500, hours=2, commission_pct=10, trainer_rate=300)

    assert price.total == 1600.0
    assert price.commission == 160.0
    assert price.trainer_earnings == 540.0
    assert price.gym_earnings == 900.0


def test_session_without_trainer():
    price = price_gym_booking("session", 450, hours=3, commission_pct=10)

    assert price.total == 1350.0
    assert price.commission == 135.0
    assert price.gym_earnings == 1215.0
    assert price.trainer_earnings == 0.0


def test_pass_is_flat_priced_and_drops_trainer():
    price = price_gym_booking("pass", 200, hours=3, commission_pct=10, trainer_rate=300)

    assert price.total == 200.0
    assert price.commission == 20.0
    assert price.gym_earnings == 180.0
    assert price.trainer_earnings == 0.0


def test_amounts_are_rounded_to_two_decimals():
    price = price_gym_booking("membership", 999.99, hours=1, commission_pct=12.5)

    assert price.commission == 125.0
    assert price.gym_earnings == 874.99


def test_trainer_booking_pays_trainer_after_commission():
    price = price_trainer_booking(800, hours=2, commission_pct=10)

    assert price.total == 1600.0
    assert price.commission == 160.0
    assert price.trainer_earnings == 1440.0
    assert price.gym_earnings == 0.0


def test_to_paise():
    assert to_paise(499.99) == 49999
    assert to_paise(1) == 100


def test_featured_package_lookup():
    assert featured_package_price("premium") == (FeaturedPackage.PREMIUM, 2499.0)
    assert featured_package_price("platinum") == (FeaturedPackage.PLATINUM, 4999.0)


def test_unknown_featured_package_falls_back_to_basic():
    assert featured_package_price("gold") == (FeaturedPackage.BASIC, 999.0)
    assert featured_package_price(None) == (FeaturedPackage.BASIC, 999.0)
    # standard is the per-day listing and has no package price
    assert featured_package_price("standard") == (FeaturedPackage.BASIC, 999.0)
