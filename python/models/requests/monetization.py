"""
Promotion purchase request models.
"""

from pydantic import BaseModel, Field


class FeaturedOrderRequest(BaseModel):
    gym_id: str
    days: int = Field(..., ge=1, le=365)


class FeaturedVerifyRequest(BaseModel):
    """The purchased days are read from the gateway order, not from this body."""
    gym_id: str
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PremiumOrderRequest(BaseModel):
    trainer_id: str
    months: int = Field(..., ge=1, le=24)


class PremiumVerifyRequest(BaseModel):
    trainer_id: str
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
