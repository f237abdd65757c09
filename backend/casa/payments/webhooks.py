"""Gateway webhook event handlers — keep payments and bookings in sync."""

import logging
import uuid

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from casa.models.booking import BookingPayment
from casa.services.payment_service import (
    get_payment_by_order,
    get_payment_by_provider_payment,
    mark_payment_completed,
    mark_payment_failed,
    mark_payment_refunded,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stripe
# ---------------------------------------------------------------------------


async def handle_checkout_session_completed(db: AsyncSession, event: stripe.Event) -> None:
    """Handle checkout.session.completed — confirm the booking once paid."""
    session = event.data.object
    payment = await get_payment_by_order(db, session.id)
    if payment is None:
        logger.warning("No local payment found for checkout session %s", session.id)
        return

    if session.payment_status != "paid":
        logger.info("Checkout session %s completed but not paid (%s)", session.id, session.payment_status)
        return

    await mark_payment_completed(
        db,
        payment,
        provider_payment_id=session.payment_intent,
        gateway_data={"payment_intent": session.payment_intent},
    )
    logger.info("Checkout completed: payment %s for booking %s", payment.id, payment.booking_id)


async def handle_checkout_session_expired(db: AsyncSession, event: stripe.Event) -> None:
    """Handle checkout.session.expired — the guest never paid."""
    session = event.data.object
    payment = await get_payment_by_order(db, session.id)
    if payment is None:
        logger.warning("No local payment found for expired checkout session %s", session.id)
        return
    await mark_payment_failed(db, payment, {"expired_session": session.id})


async def handle_payment_intent_failed(db: AsyncSession, event: stripe.Event) -> None:
    """Handle payment_intent.payment_failed — found via the metadata set at checkout."""
    intent = event.data.object
    payment_id = getattr(intent.metadata, "payment_id", None)
    if not payment_id:
        logger.info("Payment intent %s carries no payment_id, skipping", intent.id)
        return

    payment = await db.get(BookingPayment, uuid.UUID(payment_id))
    if payment is None:
        logger.warning("No local payment %s for payment intent %s", payment_id, intent.id)
        return
    await mark_payment_failed(db, payment, {"payment_intent": intent.id})


STRIPE_EVENT_HANDLERS = {
    "checkout.session.completed": handle_checkout_session_completed,
    "checkout.session.expired": handle_checkout_session_expired,
    "payment_intent.payment_failed": handle_payment_intent_failed,
}


# ---------------------------------------------------------------------------
# Razorpay (events are plain JSON dicts)
# ---------------------------------------------------------------------------


def _entity(event: dict, kind: str) -> dict:
    return event.get("payload", {}).get(kind, {}).get("entity", {})


async def handle_payment_captured(db: AsyncSession, event: dict) -> None:
    """Handle payment.captured — the webhook twin of the checkout callback."""
    entity = _entity(event, "payment")
    payment = await get_payment_by_order(db, entity.get("order_id", ""))
    if payment is None:
        logger.warning("No local payment found for Razorpay order %s", entity.get("order_id"))
        return
    await mark_payment_completed(db, payment, entity.get("id"), {"captured": entity.get("id")})


async def handle_payment_failed(db: AsyncSession, event: dict) -> None:
    entity = _entity(event, "payment")
    payment = await get_payment_by_order(db, entity.get("order_id", ""))
    if payment is None:
        logger.warning("No local payment found for Razorpay order %s", entity.get("order_id"))
        return
    await mark_payment_failed(
        db,
        payment,
        {"error_code": entity.get("error_code"), "error_description": entity.get("error_description")},
    )


async def handle_refund_processed(db: AsyncSession, event: dict) -> None:
    entity = _entity(event, "refund")
    payment = await get_payment_by_provider_payment(db, entity.get("payment_id", ""))
    if payment is None:
        logger.warning("No local payment found for Razorpay payment %s", entity.get("payment_id"))
        return
    if payment.status == "refunded":
        return
    await mark_payment_refunded(db, payment, {"refund_id": entity.get("id")})


RAZORPAY_EVENT_HANDLERS = {
    "payment.captured": handle_payment_captured,
    "payment.failed": handle_payment_failed,
    "refund.processed": handle_refund_processed,
}
