"""Pydantic v2 schemas for payment endpoints."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Gateway = Literal["razorpay", "stripe"]


class PaymentMethodResponse(BaseModel):
    id: str
    name: str
    description: str
    gateway: str
    fee_basis_points: int
    enabled: bool


class PaymentMethodsResponse(BaseModel):
    methods: list[PaymentMethodResponse]
    gateways: dict[str, bool]


class CheckoutRequest(BaseModel):
    """Start paying for a pending booking."""

    booking_id: uuid.UUID
    payment_method: str = Field("card", max_length=50)


class CheckoutResponse(BaseModel):
    """Everything the client needs to open the gateway's checkout.

    Razorpay returns ``order_id`` and ``key_id`` for the client SDK; Stripe
    returns a hosted ``checkout_url``.
    """

    payment_id: uuid.UUID
    gateway: str
    booking_id: uuid.UUID
    base_amount_paise: int
    fee_paise: int
    amount_paise: int
    currency: str
    order_id: str | None = None
    key_id: str | None = None
    checkout_url: str | None = None
    prefill: dict[str, str] = Field(default_factory=dict)


class RazorpayVerifyRequest(BaseModel):
    """Fields posted back by Razorpay Checkout's success handler."""

    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentResponse(BaseModel):
    id: uuid.UUID
    booking_id: uuid.UUID
    gateway: str
    payment_method: str
    provider_order_id: str | None = None
    provider_payment_id: str | None = None
    amount_paise: int
    fee_paise: int
    currency: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentStatusResponse(BaseModel):
    payment_status: str
    booking_id: uuid.UUID
    booking_status: str


class RefundRequest(BaseModel):
    amount_paise: int | None = Field(None, ge=1)
    reason: str | None = Field(None, max_length=255)
