"""Async Stripe API wrapper for one-time booking payments."""

import logging

import stripe
from stripe import StripeClient

from casa.config import settings

logger = logging.getLogger(__name__)


def get_stripe_client() -> StripeClient:
    """Create a StripeClient instance with async HTTP support."""
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
    )


async def create_checkout_session(
    booking_id: str,
    payment_id: str,
    description: str,
    amount_paise: int,
    success_url: str,
    cancel_url: str,
    customer_email: str | None = None,
) -> stripe.checkout.Session:
    """Create a one-time Checkout Session charging ``amount_paise`` in INR."""
    client = get_stripe_client()
    logger.info("Creating checkout session for booking %s (%s paise)", booking_id, amount_paise)
    metadata = {"booking_id": booking_id, "payment_id": payment_id}
    params: dict = {
        "mode": "payment",
        "client_reference_id": booking_id,
        "line_items": [
            {
                "price_data": {
                    "currency": settings.currency.lower(),
                    "unit_amount": amount_paise,
                    "product_data": {"name": description},
                },
                "quantity": 1,
            }
        ],
        "metadata": metadata,
        "payment_intent_data": {"metadata": metadata},
        "success_url": success_url,
        "cancel_url": cancel_url,
    }
    if customer_email:
        params["customer_email"] = customer_email
    return await client.v1.checkout.sessions.create_async(params=params)


async def create_refund(payment_intent_id: str, amount_paise: int | None = None) -> stripe.Refund:
    """Refund a payment intent, in full unless ``amount_paise`` is given."""
    client = get_stripe_client()
    params: dict = {"payment_intent": payment_intent_id}
    if amount_paise is not None:
        params["amount"] = amount_paise
    logger.info("Refunding Stripe payment intent %s", payment_intent_id)
    return await client.v1.refunds.create_async(params=params)


def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
    """Verify and construct a Stripe webhook event (synchronous)."""
    client = get_stripe_client()
    return client.construct_event(payload, sig_header, settings.stripe_webhook_secret)
