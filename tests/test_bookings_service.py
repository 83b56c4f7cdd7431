import asyncio
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, call

import pytest

from core.exceptions import (
    BadRequestError,
    BookingNotFoundError,
    InvalidSignatureError,
    OwnedGymNotFoundError,
    PassAlreadyUsedError,
    PassRejectedError,
    ServiceNotFoundError,
    SlotFullError,
    SlotUnavailableError,
)
from models.requests import BookingCreateRequest
from services.bookings_service import BookingsService, check_pass

MONDAY = date(2024, 5, 13)

SESSION = {
    "id": "svc-1",
    "gym_id": "gym-1",
    "service_type": "session",
    "price": 500,
    "duration_days": None,
    "session_count": None,
}

DAY_PASS = {
    "id": "svc-2",
    "gym_id": "gym-1",
    "service_type": "pass",
    "price": 300,
    "duration_days": 7,
    "session_count": 5,
}


@pytest.fixture
def mailer():
    return SimpleNamespace(send_booking_notification=AsyncMock(return_value=True))


@pytest.fixture
def service(repos, razorpay, mailer, platform_settings):
    repos.bookings.insert.side_effect = lambda data, conn=None: {"id": "bk-1", **data}
    return BookingsService(repos, razorpay, mailer, platform_settings)


def session_request(**overrides):
    fields = dict(gym_id="gym-1", service_id="svc-1", booking_date=MONDAY, start_time="09:00", duration_hours=2)
    fields.update(overrides)
    return BookingCreateRequest(**fields)


# ============================================================
# create_booking
# ============================================================

async def test_session_booking_checks_every_hour_and_opens_order(service, repos, razorpay, member):
    repos.services.get_active.return_value = SESSION
    repos.slots.find_starting_at.return_value = {"id": "slot-1", "max_capacity": 2}
    repos.bookings.count_covering.return_value = 1

    result = await service.create_booking(member, session_request())

    assert repos.slots.find_starting_at.await_args_list == [
        call("gym-1", 1, time(9), conn="conn"),
        call("gym-1", 1, time(10), conn="conn"),
    ]
    assert result["razorpay_order_id"] == "order_test_1"
    assert result["razorpay_key_id"] == razorpay.key_id
    assert result["amount"] == 100000

    stored = result["booking"]
    assert stored["start_time"] == time(9)
    assert stored["end_time"] == time(11)
    assert stored["total_amount"] == 1000.0
    assert stored["platform_commission"] == 100.0
    assert stored["gym_earnings"] == 900.0
    assert stored["status"] == "confirmed"
    assert stored["payment_status"] == "pending"
    assert stored["remaining_sessions"] == 1
    assert len(stored["qr_code"]) == 64
    assert stored["expires_at"] == datetime(2024, 5, 13, 11, 0, tzinfo=timezone.utc)
    assert repos.db.transactions == 1


async def test_full_slot_rejects_booking_before_payment(service, repos, razorpay, member):
    repos.services.get_active.return_value = SESSION
    repos.slots.find_starting_at.return_value = {"id": "slot-1", "max_capacity": 2}
    repos.bookings.count_covering.side_effect = [0, 2]

    with pytest.raises(SlotFullError) as exc_info:
        await service.create_booking(member, session_request())

    assert exc_info.value.details == {"time": "10:00"}
    razorpay.create_order.assert_not_awaited()
    repos.bookings.insert.assert_not_awaited()


async def test_hour_without_slot_is_unavailable(service, repos, member):
    repos.services.get_active.return_value = SESSION
    repos.slots.find_starting_at.return_value = None

    with pytest.raises(SlotUnavailableError):
        await service.create_booking(member, session_request())


async def test_service_must_belong_to_gym(service, repos, member):
    repos.services.get_active.return_value = {**SESSION, "gym_id": "other-gym"}

    with pytest.raises(ServiceNotFoundError):
        await service.create_booking(member, session_request())


async def test_session_needs_start_time(service, repos, member):
    repos.services.get_active.return_value = SESSION

    with pytest.raises(BadRequestError):
        await service.create_booking(member, session_request(start_time=None))


async def test_trainer_only_with_sessions(service, repos, member):
    repos.services.get_active.return_value = DAY_PASS

    with pytest.raises(BadRequestError):
        await service.create_booking(member, session_request(service_id="svc-2", trainer_id="tr-1"))


async def test_session_with_trainer_adds_trainer_rate(service, repos, member):
    repos.services.get_active.return_value = SESSION
    repos.trainers.get_active.return_value = {"id": "tr-1", "hourly_rate": 300}
    repos.slots.find_starting_at.return_value = {"id": "slot-1", "max_capacity": 10}
    repos.bookings.count_covering.return_value = 0

    result = await service.create_booking(member, session_request(trainer_id="tr-1"))

    assert result["booking"]["total_amount"] == 1600.0
    assert result["booking"]["trainer_earnings"] == 540.0


async def test_pass_skips_slots_and_uses_service_duration(service, repos, member):
    repos.services.get_active.return_value = DAY_PASS

    result = await service.create_booking(
        member, BookingCreateRequest(gym_id="gym-1", service_id="svc-2", booking_date=MONDAY)
    )

    repos.slots.find_starting_at.assert_not_awaited()
    stored = result["booking"]
    assert stored["start_time"] is None
    assert stored["total_amount"] == 300.0
    assert stored["total_sessions"] == 5
    assert stored["expires_at"] == datetime(2024, 5, 20, tzinfo=timezone.utc)


# ============================================================
# verify_payment
# ============================================================

async def test_payment_is_recorded_once(service, repos, member, checkout):
    repos.bookings.get_for_user.return_value = {
        "id": "bk-1", "razorpay_order_id": "order_test_1", "payment_status": "pending",
    }
    repos.bookings.mark_paid.return_value = {
        "id": "bk-1", "gym_id": "gym-1", "total_amount": 1000.0, "platform_commission": 100.0,
        "payment_status": "completed",
    }

    booking, newly_paid = await service.verify_payment(member, checkout(booking_id="bk-1"))

    assert newly_paid is True
    assert booking["payment_status"] == "completed"
    repos.bookings.mark_paid.assert_awaited_once_with("bk-1", "pay_test_1", conn="conn")
    args, kwargs = repos.transactions.record.await_args
    assert args == ("booking",)
    assert kwargs["payment_id"] == "pay_test_1"
    assert kwargs["amount"] == 1000.0


async def test_verifying_a_paid_booking_is_a_no_op(service, repos, member, checkout):
    paid = {"id": "bk-1", "razorpay_order_id": "order_test_1", "payment_status": "completed"}
    repos.bookings.get_for_user.return_value = paid

    booking, newly_paid = await service.verify_payment(member, checkout(booking_id="bk-1"))

    assert (booking, newly_paid) == (paid, False)
    repos.bookings.mark_paid.assert_not_awaited()
    repos.transactions.record.assert_not_awaited()


async def test_concurrent_verifications_record_one_transaction(service, repos, member, checkout):
    pending = {"id": "bk-1", "razorpay_order_id": "order_test_1", "payment_status": "pending"}
    repos.bookings.get_for_user.return_value = pending
    captured = []

    async def mark_paid(booking_id, payment_id, conn=None):
        await asyncio.sleep(0)
        if captured:
            return None
        captured.append(payment_id)
        return {**pending, "gym_id": "gym-1", "total_amount": 1000.0, "payment_status": "completed"}

    repos.bookings.mark_paid.side_effect = mark_paid
    request = checkout(booking_id="bk-1")

    results = await asyncio.gather(
        service.verify_payment(member, request),
        service.verify_payment(member, request),
    )

    assert sorted(newly_paid for _, newly_paid in results) == [False, True]
    repos.transactions.record.assert_awaited_once()


async def test_order_mismatch_is_not_found(service, repos, member, checkout):
    repos.bookings.get_for_user.return_value = {"id": "bk-1", "razorpay_order_id": "order_other"}

    with pytest.raises(BookingNotFoundError):
        await service.verify_payment(member, checkout(booking_id="bk-1"))


async def test_forged_signature_never_reaches_database(service, repos, member):
    request = SimpleNamespace(
        booking_id="bk-1",
        razorpay_order_id="order_test_1",
        razorpay_payment_id="pay_test_1",
        razorpay_signature="forged",
    )
    with pytest.raises(InvalidSignatureError):
        await service.verify_payment(member, request)
    repos.bookings.get_for_user.assert_not_awaited()


async def test_notify_gym_emails_gym_address(service, repos, mailer):
    repos.gyms.get_notification_contact.return_value = {
        "gym_name": "Iron Temple", "gym_email": "desk@iron.test", "owner_email": "owner@iron.test",
    }
    repos.bookings.get_notification_details.return_value = {"customer_name": "Asha"}

    assert await service.notify_gym({"id": "bk-1", "gym_id": "gym-1"}) is True
    to, details = mailer.send_booking_notification.await_args.args
    assert to == "desk@iron.test"
    assert details["gym_name"] == "Iron Temple"


async def test_notify_gym_without_email_is_skipped(service, repos, mailer):
    repos.gyms.get_notification_contact.return_value = {"gym_name": "Iron Temple"}

    assert await service.notify_gym({"id": "bk-1", "gym_id": "gym-1"}) is False
    mailer.send_booking_notification.assert_not_awaited()


async def test_cancel_only_confirmed_bookings(service, repos, member):
    repos.bookings.cancel_confirmed_for_user.return_value = None

    with pytest.raises(BookingNotFoundError):
        await service.cancel_booking(member, "bk-1")


# ============================================================
# Entry passes
# ============================================================

def _pass(**overrides):
    booking = {
        "id": "bk-1",
        "gym_id": "gym-1",
        "status": "confirmed",
        "payment_status": "completed",
        "expires_at": datetime.now(timezone.utc) + timedelta(days=1),
        "remaining_sessions": 1,
    }
    booking.update(overrides)
    return booking


@pytest.mark.parametrize("overrides, code", [
    ({"status": "used", "payment_status": "pending"}, "PASS_USED"),
    ({"status": "cancelled", "payment_status": "pending"}, "PASS_UNPAID"),
    ({"status": "cancelled"}, "PASS_CANCELLED"),
    ({"expires_at": datetime(2020, 1, 1, tzinfo=timezone.utc)}, "PASS_EXPIRED"),
])
def test_pass_rejections_in_order(overrides, code):
    with pytest.raises(PassRejectedError) as exc_info:
        check_pass(_pass(**overrides))
    assert exc_info.value.code == code
    assert exc_info.value.booking["id"] == "bk-1"


def test_pass_without_expiry_is_valid():
    check_pass(_pass(expires_at=None))


async def test_multi_session_pass_consumes_one_session(service, repos):
    repos.bookings.find_pass.return_value = _pass(remaining_sessions=3)
    repos.bookings.consume_session.return_value = {"id": "bk-1", "remaining_sessions": 2}

    result = await service.verify_pass(qr_code="abc")

    assert result["remaining_sessions"] == 2
    assert "2 session(s) remaining" in result["message"]
    repos.bookings.consume_session.assert_awaited_once_with("bk-1", 3)
    repos.bookings.mark_used.assert_not_awaited()


async def test_concurrent_scans_admit_a_one_session_pass_once(service, repos):
    repos.bookings.find_pass.return_value = _pass(remaining_sessions=1)
    admitted = []

    async def mark_used(booking_id, remaining):
        await asyncio.sleep(0)
        if admitted:
            return None
        admitted.append(booking_id)
        return {"id": booking_id, "status": "used", "remaining_sessions": 0}

    repos.bookings.mark_used.side_effect = mark_used

    results = await asyncio.gather(
        service.verify_pass(qr_code="q"),
        service.verify_pass(qr_code="q"),
        return_exceptions=True,
    )

    assert admitted == ["bk-1"]
    assert [isinstance(r, PassAlreadyUsedError) for r in results].count(True) == 1


async def test_pass_changed_by_another_scan_is_refused(service, repos):
    repos.bookings.find_pass.return_value = _pass(remaining_sessions=2)
    repos.bookings.consume_session.return_value = None

    with pytest.raises(PassAlreadyUsedError) as exc_info:
        await service.verify_pass(qr_code="q")
    assert exc_info.value.booking["id"] == "bk-1"


async def test_last_session_marks_pass_used(service, repos):
    repos.bookings.find_pass.return_value = _pass(remaining_sessions=1)
    repos.bookings.mark_used.return_value = {"id": "bk-1", "status": "used", "remaining_sessions": 0}

    result = await service.verify_pass(booking_id="bk-1", gym_id="gym-1")

    assert result["remaining_sessions"] == 0
    assert result["booking"]["status"] == "used"
    repos.bookings.find_pass.assert_awaited_once_with(qr_code=None, booking_id="bk-1", gym_id="gym-1")


async def test_verify_pass_needs_a_reference(service):
    with pytest.raises(BadRequestError):
        await service.verify_pass()


async def test_unknown_pass(service, repos):
    repos.bookings.find_pass.return_value = None
    with pytest.raises(BookingNotFoundError):
        await service.verify_pass(qr_code="nope")


async def test_owner_scanner_is_scoped_to_own_gym(service, repos, owner):
    repos.gyms.get_by_owner.return_value = {"id": "gym-1"}
    repos.bookings.find_pass.return_value = _pass()
    repos.bookings.mark_used.return_value = {"status": "used", "remaining_sessions": 0}

    await service.validate_qr(owner, "abc")

    repos.bookings.find_pass.assert_awaited_once_with(qr_code="abc", booking_id=None, gym_id="gym-1")


async def test_owner_without_gym_cannot_scan(service, repos, owner):
    repos.gyms.get_by_owner.return_value = None
    with pytest.raises(OwnedGymNotFoundError):
        await service.validate_qr(owner, "abc")


async def test_admin_scanner_sees_every_gym(service, repos, admin_user):
    repos.bookings.find_pass.return_value = _pass()
    repos.bookings.mark_used.return_value = {"status": "used", "remaining_sessions": 0}

    await service.validate_qr(admin_user, "abc")

    repos.gyms.get_by_owner.assert_not_awaited()
    repos.bookings.find_pass.assert_awaited_once_with(qr_code="abc", booking_id=None, gym_id=None)
