"""
Razorpay payment gateway client.

Orders are created through the REST API (basic auth with key id/secret).
Checkout results are trusted only after the HMAC signature check.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional

import httpx

from core.config import settings
from core.exceptions import InvalidSignatureError, PaymentError
from core.logging import get_logger

logger = get_logger(__name__)

RECEIPT_MAX_LENGTH = 40
CONNECT_TIMEOUT = 3.0


class RazorpayClient:
    """Thin async client for the Orders API."""

    def __init__(
        self,
        key_id: str = None,
        key_secret: str = None,
        api_url: str = None,
        currency: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.key_id = key_id if key_id is not None else settings.razorpay_key_id
        self.key_secret = key_secret if key_secret is not None else settings.razorpay_key_secret
        self.api_url = (api_url or settings.razorpay_api_url).rstrip("/")
        self.currency = currency or settings.payment_currency
        self.timeout = httpx.Timeout(timeout or settings.razorpay_timeout, connect=CONNECT_TIMEOUT)
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    async def _request(self, method: str, path: str, operation: str, payload: Dict[str, Any] = None) -> Dict[str, Any]:
        if not self.is_configured:
            raise PaymentError("Payment gateway is not configured", operation=operation)

        try:
            async with httpx.AsyncClient(
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, f"{self.api_url}{path}", json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Razorpay {operation} failed ({e.response.status_code}): {e.response.text}")
            raise PaymentError("Payment gateway rejected the request", operation=operation)
        except httpx.HTTPError as e:
            logger.error(f"Razorpay unreachable during {operation}: {e!r}")
            raise PaymentError("Payment gateway unavailable", operation=operation)

    async def create_order(
        self,
        amount_paise: int,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create an order.

        Returns the gateway order object; its `id` is what checkout signs.
        """
        payload = {
            "amount": int(amount_paise),
            "currency": self.currency,
            "receipt": receipt[:RECEIPT_MAX_LENGTH],
            "payment_capture": 1,
        }
        if notes:
            payload["notes"] = {k: str(v) for k, v in notes.items() if v is not None}

        order = await self._request("POST", "/orders", "create_order", payload)
        logger.info(f"Razorpay order {order.get('id')} created for {amount_paise} paise ({receipt})")
        return order

    async def fetch_order(self, order_id: str) -> Dict[str, Any]:
        """Read an order back from the gateway, including its amount and notes."""
        return await self._request("GET", f"/orders/{order_id}", "fetch_order")

    def sign(self, order_id: str, payment_id: str) -> str:
        """HMAC-SHA256 of "order_id|payment_id" keyed with the secret, hex encoded."""
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not (order_id and payment_id and signature and self.key_secret):
            return False
        return hmac.compare_digest(self.sign(order_id, payment_id), signature)

    def require_valid_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        if not self.verify_signature(order_id, payment_id, signature):
            logger.warning(f"Rejected payment signature for order {order_id}")
            raise InvalidSignatureError()
