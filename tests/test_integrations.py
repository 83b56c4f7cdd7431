import hashlib
import hmac
import io
import json

import httpx
import pytest
from PIL import Image

from core.config import settings
from core.exceptions import BadRequestError, InvalidSignatureError, PaymentError, PayloadTooLargeError
from infrastructure.mailer import render_booking_notification
from infrastructure.minio_storage import check_upload
from infrastructure.razorpay import RazorpayClient
from services.qr import generate_qr_token, new_entry_pass


# ============================================================
# Razorpay
# ============================================================

def test_signature_is_hmac_of_order_and_payment():
    client = RazorpayClient(key_id="key", key_secret="secret")
    expected = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()

    assert client.sign("order_1", "pay_1") == expected
    assert client.verify_signature("order_1", "pay_1", expected)
    assert not client.verify_signature("order_1", "pay_2", expected)
    assert not client.verify_signature("order_1", "pay_1", "")


def test_bad_signature_is_rejected():
    client = RazorpayClient(key_id="key", key_secret="secret")
    with pytest.raises(InvalidSignatureError):
        client.require_valid_signature("order_1", "pay_1", "forged")


async def test_create_order_posts_to_orders_api():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "order_abc", "currency": "INR", "amount": 150000})

    client = RazorpayClient(
        key_id="key",
        key_secret="secret",
        api_url="https://gateway.test/v1/",
        transport=httpx.MockTransport(handler),
    )
    order = await client.create_order(150000, "booking_" + "9" * 40, notes={"gym_id": "g1", "trainer_id": None})

    assert order["id"] == "order_abc"
    assert seen["url"] == "https://gateway.test/v1/orders"
    assert seen["body"]["amount"] == 150000
    assert seen["body"]["currency"] == "INR"
    assert len(seen["body"]["receipt"]) == 40
    assert seen["body"]["notes"] == {"gym_id": "g1"}


async def test_gateway_failure_becomes_payment_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    client = RazorpayClient(key_id="key", key_secret="secret", transport=transport)

    with pytest.raises(PaymentError) as exc_info:
        await client.create_order(100, "r1")
    assert exc_info.value.status_code == 502


async def test_unconfigured_gateway_refuses_orders():
    client = RazorpayClient(key_id="", key_secret="")
    assert not client.is_configured
    with pytest.raises(PaymentError):
        await client.create_order(100, "r1")


def test_gateway_calls_have_a_short_timeout(monkeypatch):
    monkeypatch.setattr(settings, "razorpay_timeout", 4.0)

    assert RazorpayClient(key_id="key", key_secret="secret").timeout.read == 4.0
    explicit = RazorpayClient(key_id="key", key_secret="secret", timeout=2.0).timeout
    assert explicit.read == 2.0
    assert explicit.connect <= 3.0


async def test_stalled_gateway_becomes_payment_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("stalled", request=request)

    client = RazorpayClient(key_id="key", key_secret="secret", transport=httpx.MockTransport(handler))

    with pytest.raises(PaymentError) as exc_info:
        await client.create_order(100, "r1")
    assert exc_info.value.status_code == 502


async def test_fetch_order_reads_the_order_back():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"id": "order_abc", "amount": 49900, "notes": {"days": 1}})

    client = RazorpayClient(
        key_id="key",
        key_secret="secret",
        api_url="https://gateway.test/v1",
        transport=httpx.MockTransport(handler),
    )
    order = await client.fetch_order("order_abc")

    assert order["amount"] == 49900
    assert seen == {"method": "GET", "url": "https://gateway.test/v1/orders/order_abc"}


# ============================================================
# Entry passes
# ============================================================

def test_qr_token_is_64_hex_chars():
    token = generate_qr_token()
    assert len(token) == 64
    int(token, 16)


def test_new_entry_pass_renders_png_data_url():
    token, image = new_entry_pass()
    assert len(token) == 64
    assert image.startswith("data:image/png;base64,")


# ============================================================
# Uploads
# ============================================================

def _png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "red").save(buf, format="PNG")
    return buf.getvalue()


def test_valid_image_passes():
    check_upload(_png(), "image/png")


@pytest.mark.parametrize("data, content_type, code", [
    (b"", "image/png", "EMPTY_FILE"),
    (b"hello", "text/plain", "INVALID_FILE_TYPE"),
    (b"not really a png", "image/png", "INVALID_IMAGE"),
])
def test_rejected_uploads(data, content_type, code):
    with pytest.raises(BadRequestError) as exc_info:
        check_upload(data, content_type)
    assert exc_info.value.code == code
    assert exc_info.value.status_code == 400


def test_oversized_upload(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_mb", 0)
    with pytest.raises(PayloadTooLargeError) as exc_info:
        check_upload(_png(), "image/png")
    assert exc_info.value.status_code == 413


def test_videos_are_not_decoded():
    check_upload(b"\x00\x00\x00\x18ftypmp42", "video/mp4", kind="video")


def test_booking_notification_mentions_booking():
    html = render_booking_notification({
        "gym_name": "Iron Temple",
        "customer_name": "Asha <script>",
        "service_name": "Day pass",
        "booking_date": "2024-05-10",
        "total_amount": 499,
    })
    assert "Iron Temple" in html
    assert "<script>" not in html
