"""
HTTP layer: routing, status codes, the response envelope and role checks.
Services are replaced with AsyncMocks; their behaviour is tested elsewhere.
"""

import io
import logging
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from core.exceptions import BadRequestError, PassAlreadyUsedError, SlotFullError
from core.logging import ColoredFormatter, build_formatter
from routers import bookings, gyms, reviews, uploads, users
from routers.admin.dependencies import get_gym_admin_service
from routers.super_admin.dependencies import get_platform_admin_service


@pytest.fixture
def fake(app):
    """fake(getter) installs an AsyncMock as the service behind `getter`."""

    def _fake(getter, service=None):
        service = service or AsyncMock()
        app.dependency_overrides[getter] = lambda: service
        return service

    return _fake


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"


# ============================================================
# Envelope
# ============================================================

def test_body_validation_uses_envelope(client, login, member, fake):
    login(member)
    fake(bookings.get_bookings_service)

    response = client.post("/api/bookings", json={"gym_id": "gym-1"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"].startswith("service_id")
    assert {tuple(e["loc"]) for e in body["meta"]["errors"]} >= {("body", "service_id"), ("body", "booking_date")}


def test_domain_error_uses_envelope(client, login, member, fake):
    login(member)
    service = fake(bookings.get_bookings_service)
    service.create_booking.side_effect = SlotFullError("10:00")

    response = client.post("/api/bookings", json={
        "gym_id": "gym-1", "service_id": "svc-1", "booking_date": "2024-05-13", "start_time": "09:00",
    })

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "data": None,
        "error": "Slot at 10:00 is fully booked",
        "code": "SLOT_FULL",
        "meta": {"time": "10:00"},
    }


def test_rejected_pass_returns_booking(client, login, owner, fake):
    login(owner)
    service = fake(bookings.get_bookings_service)
    service.validate_qr.side_effect = PassAlreadyUsedError({"id": "bk-1", "status": "used"})

    response = client.post("/api/bookings/validate-qr", json={"qr_code": "abc"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "PASS_USED"
    assert body["data"] == {"id": "bk-1", "status": "used"}


# ============================================================
# Bookings
# ============================================================

def test_create_booking(client, login, member, fake):
    login(member)
    service = fake(bookings.get_bookings_service)
    service.create_booking.return_value = {"booking": {"id": "bk-1"}, "razorpay_order_id": "order_1"}

    response = client.post("/api/bookings", json={
        "gym_id": "gym-1", "service_id": "svc-1", "booking_date": "2024-05-13",
    })

    assert response.status_code == 201
    assert response.json()["data"]["razorpay_order_id"] == "order_1"
    user, request = service.create_booking.await_args.args
    assert user is member
    assert request.booking_date == date(2024, 5, 13)
    assert request.duration_hours == 1


def test_paid_booking_notifies_gym_in_background(client, login, member, fake):
    login(member)
    notified = []

    async def notify_gym(booking):
        notified.append(booking["id"])

    service = fake(bookings.get_bookings_service)
    service.verify_payment.return_value = ({"id": "bk-1"}, True)
    service.notify_gym = notify_gym

    response = client.post("/api/bookings/verify-payment", json={
        "booking_id": "bk-1",
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "sig",
    })

    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Payment verified successfully"
    assert notified == ["bk-1"]


def test_repeat_verification_does_not_notify(client, login, member, fake):
    login(member)
    service = fake(bookings.get_bookings_service)
    service.verify_payment.return_value = ({"id": "bk-1"}, False)
    service.notify_gym = MagicMock()

    client.post("/api/bookings/verify-payment", json={
        "booking_id": "bk-1",
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": "sig",
    })

    service.notify_gym.assert_not_called()


def test_members_cannot_scan_passes(client, login, member, fake):
    login(member)
    fake(bookings.get_bookings_service)

    response = client.post("/api/bookings/validate-qr", json={"qr_code": "abc"})

    assert response.status_code == 403


# ============================================================
# Gyms and reviews
# ============================================================

def test_search_returns_pagination_meta(client, fake):
    service = fake(gyms.get_gyms_service)
    service.search.return_value = {"gyms": [], "total": 45, "search_expanded": False}

    response = client.get("/api/gyms/search", params={"category": "yoga,hiit", "page": 2, "limit": 20})

    assert response.status_code == 200
    meta = response.json()["meta"]
    assert meta["total_pages"] == 3
    assert meta["has_next"] is True
    assert meta["has_prev"] is True
    filters = service.search.await_args.args[0]
    assert filters.categories == ["yoga", "hiit"]


def test_search_limit_is_capped(client, fake):
    fake(gyms.get_gyms_service)
    response = client.get("/api/gyms/search", params={"limit": 500})
    assert response.status_code == 422


def test_nearby_without_coordinates(client, fake):
    service = fake(gyms.get_gyms_service)
    service.nearby.side_effect = BadRequestError("Latitude and longitude are required")

    response = client.get("/api/gyms/nearby")

    assert response.status_code == 400
    assert response.json()["code"] == "BAD_REQUEST"


def test_gym_detail_is_public(client, fake):
    from services.auth import optional_user

    client.app.dependency_overrides[optional_user] = lambda: None
    service = fake(gyms.get_gyms_service)
    service.get_detail.return_value = {"gym": {"id": "gym-1"}, "eligible_booking_id": None}

    response = client.get("/api/gyms/gym-1")

    assert response.status_code == 200
    service.get_detail.assert_awaited_once_with("gym-1", None)


def test_slots_take_date_query(client, fake):
    service = fake(gyms.get_gyms_service)
    service.get_slots.return_value = []

    response = client.get("/api/gyms/gym-1/slots", params={"date": "2024-05-13"})

    assert response.status_code == 200
    service.get_slots.assert_awaited_once_with("gym-1", date(2024, 5, 13))


def test_register_gym(client, login, member, fake):
    login(member)
    service = fake(gyms.get_gyms_service)
    service.register.return_value = {"id": "gym-1", "is_approved": False}

    response = client.post("/api/gyms", json={
        "name": "Iron Temple", "address": "1 Main St", "city": "Pune", "categories": ["gym"],
    })

    assert response.status_code == 201
    assert response.json()["data"]["is_approved"] is False


def test_review_pages(client, fake):
    service = fake(reviews.get_reviews_service)
    service.gym_reviews.return_value = {"reviews": [], "total": 11}

    response = client.get("/api/reviews/gym/gym-1", params={"page": 2, "limit": 5})

    assert response.status_code == 200
    service.gym_reviews.assert_awaited_once_with("gym-1", 2, 5)
    assert response.json()["meta"]["total_pages"] == 3


# ============================================================
# Users
# ============================================================

def test_profile_update_sends_only_given_fields(client, login, member, fake):
    login(member)
    service = fake(users.get_users_service)
    service.update_profile.return_value = {"id": "user-1", "age": 31}

    response = client.put("/api/users/profile", json={"age": 31})

    assert response.status_code == 200
    service.update_profile.assert_awaited_once_with("user-1", {"age": 31})


def test_wishlist_add_is_created(client, login, member, fake):
    login(member)
    service = fake(users.get_users_service)
    service.add_to_wishlist.return_value = {"user_id": "user-1", "gym_id": "gym-1"}

    response = client.post("/api/users/wishlist/gym-1")

    assert response.status_code == 201


# ============================================================
# Uploads
# ============================================================

def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (3, 3), "blue").save(buf, format="PNG")
    return buf.getvalue()


def test_upload_image(client, login, member, fake):
    login(member)
    storage = fake(uploads.get_storage)
    storage.upload.return_value = {"url": "http://cdn.test/a.png", "object_name": "uploads/a.png", "size": 70}

    response = client.post("/api/uploads/image", files={"image": ("a.png", _png(), "image/png")})

    assert response.status_code == 200
    assert response.json()["data"]["url"] == "http://cdn.test/a.png"


def test_upload_rejects_non_images(client, login, member, fake):
    login(member)
    storage = fake(uploads.get_storage)

    response = client.post("/api/uploads/image", files={"image": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_FILE_TYPE"
    storage.upload.assert_not_awaited()


# ============================================================
# Dashboards
# ============================================================

def test_gym_owner_dashboard(client, login, owner, fake):
    login(owner)
    service = fake(get_gym_admin_service)
    service.get_stats.return_value = {"gym_id": "gym-1", "total_bookings": 3}

    response = client.get("/api/admin/gym/stats")

    assert response.status_code == 200
    assert response.json()["data"]["total_bookings"] == 3


def test_member_cannot_open_gym_dashboard(client, login, member, fake):
    login(member)
    fake(get_gym_admin_service)

    assert client.get("/api/admin/gym/stats").status_code == 403


def test_trainer_form_with_photo(client, login, owner, fake):
    login(owner)
    service = fake(get_gym_admin_service)
    service.manage_trainer.return_value = {"message": "Trainer added"}

    response = client.post(
        "/api/admin/gym/trainers",
        data={"action": "create", "trainer_data": '{"name": "Kiran"}'},
        files={"profile_image": ("kiran.png", _png(), "image/png")},
    )

    assert response.status_code == 200
    args, kwargs = service.manage_trainer.await_args
    assert args == (owner, "create")
    assert kwargs["trainer_data"] == '{"name": "Kiran"}'
    content, filename, content_type = kwargs["profile_image"]
    assert (filename, content_type) == ("kiran.png", "image/png")
    assert kwargs["intro_video"] is None


def test_admin_settings_update(client, login, admin_user, fake):
    login(admin_user)
    service = fake(get_platform_admin_service)
    service.update_settings.return_value = {"platform_commission": "12"}

    response = client.put("/api/super-admin/settings", json={"platform_commission": "12"})

    assert response.status_code == 200
    service.update_settings.assert_awaited_once_with({"platform_commission": "12"})


def test_owner_cannot_open_super_admin(client, login, owner, fake):
    login(owner)
    fake(get_platform_admin_service)

    response = client.get("/api/super-admin/users")

    assert response.status_code == 403


# ============================================================
# Request logging
# ============================================================

def test_api_requests_are_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="api.requests"):
        client.get("/api/health?full=1")
        client.get("/docs")

    lines = [r.getMessage() for r in caplog.records if r.name == "api.requests"]
    assert lines[0] == "→ GET /api/health query=full=1"
    assert lines[1].startswith("← 200 (")
    assert lines[1].endswith("path=/api/health")
    assert len(lines) == 2


def test_log_colors_follow_the_terminal(monkeypatch):
    monkeypatch.setattr("sys.stdout", io.StringIO())
    assert not isinstance(build_formatter(), ColoredFormatter)
    assert isinstance(build_formatter(use_colors=True), ColoredFormatter)


def test_colored_level_does_not_leak_into_other_handlers():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

    assert "\033[33m" in build_formatter(use_colors=True).format(record)
    assert record.levelname == "WARNING"
