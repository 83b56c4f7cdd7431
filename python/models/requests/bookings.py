"""
Booking, payment and entry pass request models.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class BookingCreateRequest(BaseModel):
    """Book a gym service. start_time ("HH:MM") is required for sessions."""

    gym_id: str
    service_id: str
    booking_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    duration_hours: int = Field(1, ge=1, le=12)
    trainer_id: Optional[str] = None


class PaymentVerifyRequest(BaseModel):
    """Checkout result returned by the gateway widget."""

    booking_id: str
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PassVerifyRequest(BaseModel):
    """Scan result: a QR token or a booking id."""

    qr_code: Optional[str] = None
    booking_id: Optional[str] = None


class TrainerBookingCreateRequest(BaseModel):
    trainer_id: str
    booking_date: date
    start_time: str
    end_time: str
    duration_hours: int = Field(..., ge=1, le=12)
    notes: Optional[str] = None
