import asyncio
from datetime import date, timedelta

import pytest

from core.exceptions import (
    BadRequestError,
    BookingNotFoundError,
    ConflictError,
    GymNotFoundError,
    InsufficientPermissionsError,
    NotFoundError,
    TrainerNotFoundError,
    TrainerUnavailableError,
)
from models.requests import TrainerBookingCreateRequest
from services.monetization_service import MonetizationService, order_terms, short_receipt
from services.scheduling import utcnow
from services.trainers_service import TrainersService


@pytest.fixture
def trainers(repos, razorpay, platform_settings):
    repos.trainer_bookings.insert.side_effect = lambda data, conn=None: {"id": "tb-1", **data}
    return TrainersService(repos, razorpay, platform_settings)


@pytest.fixture
def monetization(repos, razorpay, platform_settings):
    return MonetizationService(repos, razorpay, platform_settings)


def trainer_request(**overrides):
    fields = dict(
        trainer_id="tr-1",
        booking_date=date(2024, 5, 13),
        start_time="07:00",
        end_time="09:00",
        duration_hours=2,
    )
    fields.update(overrides)
    return TrainerBookingCreateRequest(**fields)


# ============================================================
# Trainers
# ============================================================

async def test_trainer_booking_waits_for_payment(trainers, repos, member):
    repos.trainers.get_active.return_value = {"id": "tr-1", "gym_id": "gym-1", "hourly_rate": 800}
    repos.trainer_bookings.find_overlapping.return_value = None

    result = await trainers.book(member, trainer_request())

    stored = result["booking"]
    assert stored["status"] == "pending_payment"
    assert stored["payment_status"] == "pending"
    assert stored["gym_id"] == "gym-1"
    assert stored["total_amount"] == 1600.0
    assert stored["trainer_earnings"] == 1440.0
    assert result["amount"] == 160000


async def test_trainer_row_is_locked_before_overlap_check(trainers, repos, member):
    repos.trainers.get_active.return_value = {"id": "tr-1", "gym_id": "gym-1", "hourly_rate": 800}
    repos.trainer_bookings.find_overlapping.return_value = None
    steps = []
    repos.trainers.lock.side_effect = lambda trainer_id, conn: steps.append(("lock", trainer_id, conn))
    repos.trainer_bookings.find_overlapping.side_effect = lambda *args, **kwargs: steps.append(("overlap", kwargs["conn"]))

    await trainers.book(member, trainer_request())

    assert steps == [("lock", "tr-1", "conn"), ("overlap", "conn")]


async def test_trainer_double_booking_is_refused(trainers, repos, razorpay, member):
    repos.trainers.get_active.return_value = {"id": "tr-1", "hourly_rate": 800}
    repos.trainer_bookings.find_overlapping.return_value = {"id": "tb-0"}

    with pytest.raises(TrainerUnavailableError):
        await trainers.book(member, trainer_request())
    razorpay.create_order.assert_not_awaited()


async def test_trainer_booking_end_before_start(trainers, repos, member):
    repos.trainers.get_active.return_value = {"id": "tr-1", "hourly_rate": 800}

    with pytest.raises(BadRequestError):
        await trainers.book(member, trainer_request(start_time="10:00", end_time="09:00"))


async def test_inactive_trainer_cannot_be_booked(trainers, repos, member):
    repos.trainers.get_active.return_value = None
    with pytest.raises(TrainerNotFoundError):
        await trainers.book(member, trainer_request())


async def test_trainer_payment_confirms_booking(trainers, repos, member, checkout):
    repos.trainer_bookings.get_for_user.return_value = {
        "id": "tb-1", "razorpay_order_id": "order_test_1", "payment_status": "pending",
    }
    repos.trainer_bookings.mark_paid.return_value = {
        "id": "tb-1", "trainer_id": "tr-1", "total_amount": 1600.0, "status": "confirmed",
    }

    booking = await trainers.verify_payment(member, checkout(booking_id="tb-1"))

    assert booking["status"] == "confirmed"
    assert repos.transactions.record.await_args.args == ("trainer_booking",)


async def test_concurrent_trainer_verifications_record_once(trainers, repos, member, checkout):
    pending = {"id": "tb-1", "razorpay_order_id": "order_test_1", "payment_status": "pending"}
    repos.trainer_bookings.get_for_user.return_value = pending
    confirmed = []

    async def mark_paid(booking_id, payment_id, conn=None):
        await asyncio.sleep(0)
        if confirmed:
            return None
        confirmed.append(booking_id)
        return {**pending, "trainer_id": "tr-1", "total_amount": 1600.0, "status": "confirmed"}

    repos.trainer_bookings.mark_paid.side_effect = mark_paid
    request = checkout(booking_id="tb-1")

    await asyncio.gather(trainers.verify_payment(member, request), trainers.verify_payment(member, request))

    assert confirmed == ["tb-1"]
    repos.transactions.record.assert_awaited_once()


async def test_trainer_payment_for_unknown_booking(trainers, repos, member, checkout):
    repos.trainer_bookings.get_for_user.return_value = None
    with pytest.raises(BookingNotFoundError):
        await trainers.verify_payment(member, checkout(booking_id="tb-1"))


async def test_my_profile_requires_trainer_row(trainers, repos, member):
    repos.trainers.get_by_user.return_value = None
    with pytest.raises(NotFoundError):
        await trainers.get_my_profile(member)


# ============================================================
# Monetization
# ============================================================

def replay_orders(razorpay):
    """fetch_order returns what the last create_order call opened, the way the gateway would."""

    async def fetch(order_id):
        amount, _ = razorpay.create_order.await_args.args
        notes = razorpay.create_order.await_args.kwargs["notes"]
        return {"id": order_id, "amount": amount, "notes": {k: str(v) for k, v in notes.items()}}

    razorpay.fetch_order.side_effect = fetch


@pytest.mark.parametrize("notes", [
    [],
    {"type": "trainer_premium", "gym_id": "gym-1", "days": "3"},
    {"type": "featured_listing", "gym_id": "gym-1"},
    {"type": "featured_listing", "gym_id": "gym-1", "days": "many"},
])
def test_order_terms_refuse_foreign_orders(notes):
    with pytest.raises(BadRequestError):
        order_terms({"amount": 100, "notes": notes}, "featured_listing", "gym_id", "gym-1", "days")


def test_order_terms():
    order = {"amount": 149700, "notes": {"type": "featured_listing", "gym_id": "gym-1", "days": "3"}}
    assert order_terms(order, "featured_listing", "gym_id", "gym-1", "days") == (3, 1497.0)


def test_short_receipt_fits_gateway_limit():
    receipt = short_receipt("feat", "0f8fad5b-d9cb-469f-a165-70867728950e")
    assert receipt.startswith("feat_0f8fad5b_")
    assert len(receipt) <= 40


async def test_featured_order_priced_per_day(monetization, repos, razorpay, owner):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}

    order = await monetization.create_featured_order(owner, "gym-1", days=3)

    assert order == {"order_id": "order_test_1", "amount": 149700, "currency": "INR", "key_id": razorpay.key_id}


async def test_featured_order_for_someone_elses_gym(monetization, repos, owner):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "other"}
    with pytest.raises(InsufficientPermissionsError):
        await monetization.create_featured_order(owner, "gym-1", days=3)


async def test_featured_order_for_missing_gym(monetization, repos, owner):
    repos.gyms.get_by_id.return_value = None
    with pytest.raises(GymNotFoundError):
        await monetization.create_featured_order(owner, "gym-1", days=3)


async def test_featured_payment_activates_listing(monetization, repos, razorpay, owner, checkout):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}
    repos.transactions.exists_for_payment.return_value = False
    repos.featured.create.return_value = {"id": "fl-1"}
    replay_orders(razorpay)
    await monetization.create_featured_order(owner, "gym-1", days=5)

    result = await monetization.verify_featured_payment(owner, checkout(gym_id="gym-1"))

    assert result["listing"] == {"id": "fl-1"}
    assert result["featured_until"] - utcnow() > timedelta(days=4, hours=23)
    gym_id, package, amount = repos.featured.create.await_args.args[:3]
    assert (gym_id, package, amount) == ("gym-1", "standard", 2495.0)
    repos.gyms.set_featured.assert_awaited_once()
    assert repos.transactions.record.await_args.args == ("featured_listing",)


async def test_featured_days_come_from_the_paid_order(monetization, repos, razorpay, owner, checkout):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}
    repos.transactions.exists_for_payment.return_value = False
    replay_orders(razorpay)
    await monetization.create_featured_order(owner, "gym-1", days=1)

    result = await monetization.verify_featured_payment(owner, checkout(gym_id="gym-1", days=365))

    assert result["featured_until"] - utcnow() < timedelta(days=1, minutes=1)
    _, kwargs = repos.transactions.record.await_args
    assert kwargs["amount"] == 499.0
    assert kwargs["metadata"]["days"] == 1
    razorpay.fetch_order.assert_awaited_once_with("order_test_1")


async def test_order_for_another_gym_is_refused(monetization, repos, razorpay, owner, checkout):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}
    repos.transactions.exists_for_payment.return_value = False
    razorpay.fetch_order.return_value = {
        "id": "order_test_1", "amount": 49900,
        "notes": {"type": "featured_listing", "gym_id": "gym-2", "days": "1"},
    }

    with pytest.raises(BadRequestError):
        await monetization.verify_featured_payment(owner, checkout(gym_id="gym-1"))
    repos.transactions.record.assert_not_awaited()


async def test_concurrent_featured_verification_is_absorbed(monetization, repos, razorpay, owner, checkout):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}
    repos.transactions.exists_for_payment.return_value = False
    razorpay.fetch_order.return_value = {
        "id": "order_test_1", "amount": 49900,
        "notes": {"type": "featured_listing", "gym_id": "gym-1", "days": "1"},
    }
    repos.transactions.record.side_effect = ConflictError("Transaction already exists")

    result = await monetization.verify_featured_payment(owner, checkout(gym_id="gym-1"))

    assert result == {"message": "Featured listing already active"}
    repos.gyms.set_featured.assert_not_awaited()


async def test_featured_payment_is_idempotent(monetization, repos, owner, checkout):
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}
    repos.transactions.exists_for_payment.return_value = True

    result = await monetization.verify_featured_payment(owner, checkout(gym_id="gym-1", days=5))

    assert result == {"message": "Featured listing already active"}
    repos.featured.create.assert_not_awaited()


async def test_premium_order_priced_per_month(monetization, repos, member):
    repos.trainers.get_by_id.return_value = {"id": "tr-1", "user_id": "user-1"}

    order = await monetization.create_premium_order(member, "tr-1", months=2)

    assert order["amount"] == 59800


async def test_premium_only_for_own_profile(monetization, repos, member):
    repos.trainers.get_by_id.return_value = {"id": "tr-1", "user_id": "someone"}
    with pytest.raises(InsufficientPermissionsError):
        await monetization.create_premium_order(member, "tr-1", months=1)


async def test_premium_payment_extends_profile(monetization, repos, razorpay, member, checkout):
    repos.trainers.get_by_id.return_value = {"id": "tr-1", "user_id": "user-1"}
    repos.transactions.exists_for_payment.return_value = False
    repos.trainers.set_premium.return_value = {"id": "tr-1", "is_premium": True}
    replay_orders(razorpay)
    await monetization.create_premium_order(member, "tr-1", months=1)

    result = await monetization.verify_premium_payment(member, checkout(trainer_id="tr-1"))

    assert result["trainer"]["is_premium"] is True
    assert result["premium_until"] - utcnow() > timedelta(days=29, hours=23)
    _, kwargs = repos.transactions.record.await_args
    assert kwargs["amount"] == 299.0
    assert kwargs["user_id"] == "user-1"


async def test_settings_override_prices(monetization, repos, owner):
    repos.settings.get_value.return_value = "100"
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}

    order = await monetization.create_featured_order(owner, "gym-1", days=2)

    assert order["amount"] == 20000


async def test_malformed_setting_falls_back_to_default(monetization, repos, owner):
    repos.settings.get_value.return_value = "a lot"
    repos.gyms.get_by_id.return_value = {"id": "gym-1", "owner_id": "owner-1"}

    order = await monetization.create_featured_order(owner, "gym-1", days=1)

    assert order["amount"] == 49900
