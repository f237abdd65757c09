"""Payment webhook endpoints — receive and process Stripe and Razorpay events."""

import json
import logging

import stripe
from fastapi import APIRouter, HTTPException, Request, status

from casa.database import async_session_factory
from casa.payments.razorpay_client import verify_webhook_signature
from casa.payments.stripe_client import construct_webhook_event
from casa.payments.webhooks import RAZORPAY_EVENT_HANDLERS, STRIPE_EVENT_HANDLERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


async def _dispatch(handler, event, event_id: str) -> None:
    # Webhooks carry no auth context, so they get their own session.
    async with async_session_factory() as db:
        try:
            await handler(db, event)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.exception("Error processing webhook event %s", event_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Webhook processing failed",
            ) from e


@router.post("/stripe")
async def stripe_webhook(request: Request) -> dict[str, str]:
    """Receive and process Stripe webhook events."""
    # Raw bytes are required for signature verification
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = construct_webhook_event(payload, sig_header)
    except stripe.SignatureVerificationError as e:
        logger.warning("Stripe webhook signature verification failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        ) from e
    except ValueError as e:
        logger.warning("Invalid Stripe webhook payload")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        ) from e

    handler = STRIPE_EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.debug("Unhandled Stripe event type: %s", event.type)
        return {"status": "ignored"}

    logger.info("Processing Stripe event: %s (id=%s)", event.type, event.id)
    await _dispatch(handler, event, event.id)
    return {"status": "processed"}


@router.post("/razorpay")
async def razorpay_webhook(request: Request) -> dict[str, str]:
    """Receive and process Razorpay webhook events."""
    payload = await request.body()
    signature = request.headers.get("x-razorpay-signature", "")

    if not verify_webhook_signature(payload, signature):
        logger.warning("Razorpay webhook signature verification failed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )

    try:
        event = json.loads(payload)
    except ValueError as e:
        logger.warning("Invalid Razorpay webhook payload")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload",
        ) from e

    event_type = event.get("event", "")
    handler = RAZORPAY_EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.debug("Unhandled Razorpay event type: %s", event_type)
        return {"status": "ignored"}

    event_id = request.headers.get("x-razorpay-event-id", event_type)
    logger.info("Processing Razorpay event: %s (id=%s)", event_type, event_id)
    await _dispatch(handler, event, event_id)
    return {"status": "processed"}
