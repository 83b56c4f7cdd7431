"""
Shared fixtures.

Service tests run against a bundle of AsyncMock repositories; the
database only has to provide `transaction()`. API tests import the real
application and replace auth and services through dependency_overrides,
so no database, gateway or object store is contacted.
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from infrastructure.razorpay import RazorpayClient
from services.platform_settings import PlatformSettings

REPOSITORY_NAMES = (
    "users", "wishlist", "metrics", "gyms", "services", "slots", "trainers",
    "availability", "trainer_bookings", "bookings", "reviews", "transactions",
    "payouts", "featured", "subscriptions", "settings", "notifications",
    "banners", "pages", "ads",
)

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"


class FakeDB:
    """Stands in for the pool client; counts opened transactions."""

    def __init__(self):
        self.transactions = 0

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield "conn"


@pytest.fixture
def repos():
    bundle = SimpleNamespace(db=FakeDB())
    for name in REPOSITORY_NAMES:
        setattr(bundle, name, AsyncMock())
    # no overrides in system_settings: config defaults apply
    bundle.settings.get_value.return_value = None
    return bundle


@pytest.fixture
def razorpay():
    client = RazorpayClient(key_id=KEY_ID, key_secret=KEY_SECRET, currency="INR")
    client.create_order = AsyncMock(return_value={"id": "order_test_1", "currency": "INR"})
    client.fetch_order = AsyncMock()
    return client


@pytest.fixture
def platform_settings(repos):
    return PlatformSettings(repos.settings)


@pytest.fixture
def member():
    return {"id": "user-1", "role": "user", "name": "Asha", "is_active": True}


@pytest.fixture
def owner():
    return {"id": "owner-1", "role": "gym_owner", "name": "Ravi", "is_active": True}


@pytest.fixture
def admin_user():
    return {"id": "admin-1", "role": "admin", "name": "Root", "is_active": True}


@pytest.fixture
def checkout(razorpay):
    """checkout(**fields) builds a gateway result carrying a valid signature."""

    def _checkout(order_id="order_test_1", payment_id="pay_test_1", **extra):
        return SimpleNamespace(
            razorpay_order_id=order_id,
            razorpay_payment_id=payment_id,
            razorpay_signature=razorpay.sign(order_id, payment_id),
            **extra,
        )

    return _checkout


# ============================================================
# API
# ============================================================

@pytest.fixture
def app():
    from main import app as application

    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # no context manager: the lifespan would open the database pool
    return TestClient(app)


@pytest.fixture
def login(app):
    """login(user) makes require_user and optional_user resolve to `user`."""
    from services.auth import optional_user, require_user

    def _login(user):
        app.dependency_overrides[require_user] = lambda: user
        app.dependency_overrides[optional_user] = lambda: user
        return user

    return _login
