"""Payment service — checkout, verification, refunds, and payment state updates."""

import logging
import uuid

import stripe
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casa.config import settings
from casa.exceptions import (
    ConflictError,
    NotFoundError,
    PaymentGatewayError,
    PaymentVerificationError,
    ValidationError,
)
from casa.models.booking import Booking, BookingPayment
from casa.models.user import UserProfile
from casa.payments import razorpay_client, stripe_client
from casa.payments.methods import (
    PAYMENT_METHODS,
    calculate_payment_amount,
    get_payment_method,
    is_available,
)
from casa.services import booking_service

logger = logging.getLogger(__name__)

# A payment in one of these states is never moved by a gateway event.
FINAL_PAYMENT_STATUSES = ("completed", "refunded")


def list_payment_methods() -> list[dict]:
    return [
        {
            "id": m.id,
            "name": m.name,
            "description": m.description,
            "gateway": m.gateway,
            "fee_basis_points": m.fee_basis_points,
            "enabled": is_available(m),
        }
        for m in PAYMENT_METHODS.values()
    ]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_payment_by_order(db: AsyncSession, provider_order_id: str) -> BookingPayment | None:
    """Find a payment by Razorpay order id or Stripe Checkout Session id."""
    result = await db.execute(select(BookingPayment).where(BookingPayment.provider_order_id == provider_order_id))
    return result.scalar_one_or_none()


async def get_payment_by_provider_payment(db: AsyncSession, provider_payment_id: str) -> BookingPayment | None:
    result = await db.execute(
        select(BookingPayment)
        .where(BookingPayment.provider_payment_id == provider_payment_id)
        .order_by(BookingPayment.created_at.desc())
    )
    return result.scalars().first()


async def get_payment_status(db: AsyncSession, provider_payment_id: str, user: UserProfile) -> dict:
    payment = await get_payment_by_provider_payment(db, provider_payment_id)
    if payment is None:
        raise NotFoundError("Payment not found")
    booking = await booking_service.get_booking_for_user(db, payment.booking_id, user)
    return {
        "payment_status": payment.status,
        "booking_id": booking.id,
        "booking_status": booking.status,
    }


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


async def start_payment(
    db: AsyncSession,
    user: UserProfile,
    booking_id: uuid.UUID,
    method_id: str,
) -> dict:
    """Open a gateway checkout for a pending, unpaid booking.

    The gateway fee of the chosen method is added to the booking total. A
    ``BookingPayment`` row records the attempt before the gateway is called
    so its id can travel in the gateway's metadata.

    Raises:
        NotFoundError: The booking does not exist or is not the caller's.
        ConflictError: The booking is not awaiting payment.
        ValidationError: The method is unknown, disabled, or its gateway unconfigured.
        PaymentGatewayError: The gateway call failed.
    """
    booking = await booking_service.get_booking_for_user(db, booking_id, user)
    if booking.status != "pending" or booking.payment_status != "pending":
        raise ConflictError("Booking is not awaiting payment")

    method = get_payment_method(method_id)
    if method is None or not is_available(method):
        raise ValidationError(f"Payment method '{method_id}' is not available")

    amount = calculate_payment_amount(booking.total_amount_paise, method.id)
    payment = BookingPayment(
        booking_id=booking.id,
        gateway=method.gateway,
        payment_method=method.id,
        amount_paise=amount.total_amount,
        fee_paise=amount.fees,
        currency=amount.currency,
        status="pending",
    )
    db.add(payment)
    await db.flush()

    details = booking.guest_details or {}
    response = {
        "payment_id": payment.id,
        "gateway": method.gateway,
        "booking_id": booking.id,
        "base_amount_paise": amount.base_amount,
        "fee_paise": amount.fees,
        "amount_paise": amount.total_amount,
        "currency": amount.currency,
    }

    if method.gateway == "razorpay":
        order = await razorpay_client.create_order(
            amount.total_amount,
            receipt=booking.confirmation_code,
            notes={"booking_id": str(booking.id), "payment_id": str(payment.id)},
        )
        payment.provider_order_id = order["id"]
        payment.gateway_response = {"order": order}
        response.update(
            order_id=order["id"],
            key_id=settings.razorpay_key_id,
            prefill={
                "name": details.get("full_name") or "",
                "email": details.get("email") or "",
                "contact": user.phone,
            },
        )
    else:
        try:
            session = await stripe_client.create_checkout_session(
                booking_id=str(booking.id),
                payment_id=str(payment.id),
                description=f"{booking.property.name} ({booking.check_in} to {booking.check_out})",
                amount_paise=amount.total_amount,
                success_url=f"{settings.frontend_url}/bookings/{booking.id}?payment=success",
                cancel_url=f"{settings.frontend_url}/bookings/{booking.id}?payment=cancelled",
                customer_email=details.get("email"),
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout error: %s", e)
            raise PaymentGatewayError(str(e)) from e
        payment.provider_order_id = session.id
        payment.gateway_response = {"checkout_session": session.id}
        response["checkout_url"] = session.url

    await db.flush()
    logger.info(
        "Started %s payment %s for booking %s (%s paise incl. %s fee)",
        method.gateway,
        payment.id,
        booking.id,
        amount.total_amount,
        amount.fees,
    )
    return response


# ---------------------------------------------------------------------------
# Payment state
# ---------------------------------------------------------------------------


async def mark_payment_completed(
    db: AsyncSession,
    payment: BookingPayment,
    provider_payment_id: str | None,
    gateway_data: dict | None = None,
) -> Booking:
    """Record a successful payment and confirm its booking.

    Safe to call again for the same payment, including redelivered gateway
    events. A refunded payment is never reopened, and only a pending booking
    is confirmed. A payment arriving for a booking that was already released
    is recorded but leaves the booking cancelled, so an admin can refund it.
    """
    booking = await booking_service.get_booking(db, payment.booking_id)
    if payment.status == "refunded":
        logger.info("Ignoring completion for refunded payment %s", payment.id)
        return booking
    if payment.status != "completed":
        payment.status = "completed"
        payment.provider_payment_id = provider_payment_id
        payment.gateway_response = {**(payment.gateway_response or {}), **(gateway_data or {})}
        await db.flush()

    if booking.status == "pending":
        return await booking_service.confirm_booking(db, booking)

    if booking.status == "cancelled" and booking.payment_status != "refunded":
        booking.payment_status = "completed"
        await db.flush()
        logger.warning(
            "Payment %s completed for cancelled booking %s; refund required",
            payment.id,
            booking.id,
        )
    else:
        logger.info("Payment %s recorded for %s booking %s", payment.id, booking.status, booking.id)
    return booking


async def mark_payment_failed(db: AsyncSession, payment: BookingPayment, gateway_data: dict | None = None) -> None:
    if payment.status in FINAL_PAYMENT_STATUSES:
        return
    payment.status = "failed"
    payment.gateway_response = {**(payment.gateway_response or {}), **(gateway_data or {})}
    await db.flush()
    logger.info("Payment %s for booking %s failed", payment.id, payment.booking_id)


async def mark_payment_refunded(db: AsyncSession, payment: BookingPayment, gateway_data: dict | None = None) -> None:
    payment.status = "refunded"
    payment.gateway_response = {**(payment.gateway_response or {}), **(gateway_data or {})}
    booking = await booking_service.get_booking(db, payment.booking_id)
    booking.payment_status = "refunded"
    await db.flush()
    logger.info("Payment %s for booking %s refunded", payment.id, payment.booking_id)


async def verify_razorpay_payment(
    db: AsyncSession,
    user: UserProfile,
    order_id: str,
    payment_id: str,
    signature: str,
) -> Booking:
    """Verify the Checkout callback signature and confirm the booking.

    Raises:
        NotFoundError: Unknown order, or not the caller's booking.
        PaymentVerificationError: The signature does not match. The attempt
            is stored as failed before the error is raised.
    """
    payment = await get_payment_by_order(db, order_id)
    if payment is None or payment.gateway != "razorpay":
        raise NotFoundError("Payment not found")
    booking = await booking_service.get_booking(db, payment.booking_id)
    if booking.user_id != user.id and not user.is_admin:
        raise NotFoundError("Payment not found")

    if not razorpay_client.verify_payment_signature(order_id, payment_id, signature):
        logger.warning("Signature mismatch for Razorpay order %s", order_id)
        await mark_payment_failed(db, payment, {"failed_payment_id": payment_id})
        # Keep the failed attempt; the request session rolls back on error.
        await db.commit()
        raise PaymentVerificationError()

    return await mark_payment_completed(db, payment, payment_id, {"payment_id": payment_id})


async def refund_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    amount_paise: int | None = None,
    reason: str | None = None,
) -> Booking:
    """Refund the booking's completed payment and cancel the booking.

    Completed stays are refunded but stay completed.
    """
    booking = await booking_service.get_booking(db, booking_id)
    result = await db.execute(
        select(BookingPayment)
        .where(BookingPayment.booking_id == booking.id, BookingPayment.status == "completed")
        .order_by(BookingPayment.created_at.desc())
    )
    payment = result.scalars().first()
    if payment is None or not payment.provider_payment_id:
        raise ConflictError("Booking has no completed payment to refund")
    if amount_paise is not None and amount_paise > payment.amount_paise:
        raise ValidationError("Refund exceeds the amount paid")

    if payment.gateway == "razorpay":
        refund = await razorpay_client.refund_payment(
            payment.provider_payment_id,
            amount_paise,
            notes={"booking_id": str(booking.id), "reason": reason or ""},
        )
        refund_data = {"refund": refund}
    else:
        try:
            refund = await stripe_client.create_refund(payment.provider_payment_id, amount_paise)
        except stripe.StripeError as e:
            logger.error("Stripe refund error: %s", e)
            raise PaymentGatewayError(str(e)) from e
        refund_data = {"refund_id": refund.id}

    await mark_payment_refunded(db, payment, refund_data)
    if booking.status in ("pending", "confirmed"):
        booking = await booking_service.update_status(db, booking, "cancelled", reason or "refunded")
    else:
        await db.refresh(booking)
    logger.info("Refunded booking %s via %s", booking.id, payment.gateway)
    return booking
