"""Payments API — method catalogue, checkout, and Razorpay verification."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_user, get_db
from casa.config import settings
from casa.models.user import UserProfile
from casa.schemas.booking import BookingResponse
from casa.schemas.payment import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentMethodResponse,
    PaymentMethodsResponse,
    PaymentStatusResponse,
    RazorpayVerifyRequest,
)
from casa.services import payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.get("/methods", response_model=PaymentMethodsResponse)
async def list_methods() -> PaymentMethodsResponse:
    """List payment methods and which gateways are configured (public)."""
    return PaymentMethodsResponse(
        methods=[PaymentMethodResponse(**m) for m in payment_service.list_payment_methods()],
        gateways=settings.payment_gateway_status(),
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> CheckoutResponse:
    """Start paying for a pending booking with the chosen method."""
    result = await payment_service.start_payment(db, current_user, body.booking_id, body.payment_method)
    return CheckoutResponse(**result)


@router.post("/razorpay/verify", response_model=BookingResponse)
async def verify_razorpay(
    body: RazorpayVerifyRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingResponse:
    """Verify the Checkout success callback and confirm the booking."""
    booking = await payment_service.verify_razorpay_payment(
        db,
        current_user,
        body.razorpay_order_id,
        body.razorpay_payment_id,
        body.razorpay_signature,
    )
    return BookingResponse.model_validate(booking)


@router.get("/status/{provider_payment_id}", response_model=PaymentStatusResponse)
async def payment_status(
    provider_payment_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> PaymentStatusResponse:
    result = await payment_service.get_payment_status(db, provider_payment_id, current_user)
    return PaymentStatusResponse(**result)
