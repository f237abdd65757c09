"""Async Razorpay REST client (orders, payments, refunds, signatures)."""

import hashlib
import hmac
import logging

import httpx

from casa.config import settings
from casa.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

_TIMEOUT = httpx.Timeout(15.0)


def get_razorpay_client() -> httpx.AsyncClient:
    """HTTP client authenticated with the key id / secret pair."""
    return httpx.AsyncClient(
        base_url=settings.razorpay_api_url,
        auth=(settings.razorpay_key_id, settings.razorpay_key_secret),
        timeout=_TIMEOUT,
    )


async def _request(method: str, path: str, payload: dict | None = None) -> dict:
    try:
        async with get_razorpay_client() as client:
            response = await client.request(method, path, json=payload)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as e:
        logger.exception("Razorpay %s %s returned %s: %s", method, path, e.response.status_code, e.response.text)
        raise PaymentGatewayError("Razorpay rejected the request") from e
    except httpx.HTTPError as e:
        logger.exception("Razorpay %s %s failed", method, path)
        raise PaymentGatewayError("Could not reach Razorpay") from e


async def create_order(amount_paise: int, receipt: str, notes: dict[str, str] | None = None) -> dict:
    """Create an order; Razorpay Checkout is then opened against its id."""
    logger.info("Creating Razorpay order for receipt %s (%s paise)", receipt, amount_paise)
    return await _request(
        "POST",
        "/orders",
        {
            "amount": amount_paise,
            "currency": settings.currency,
            "receipt": receipt,
            "notes": notes or {},
        },
    )


async def refund_payment(payment_id: str, amount_paise: int | None = None, notes: dict[str, str] | None = None) -> dict:
    """Refund a captured payment, in full unless ``amount_paise`` is given."""
    payload: dict = {"notes": notes or {}}
    if amount_paise is not None:
        payload["amount"] = amount_paise
    logger.info("Refunding Razorpay payment %s", payment_id)
    return await _request("POST", f"/payments/{payment_id}/refund", payload)


def _hmac_sha256(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """Check the signature Checkout returns: HMAC-SHA256 of ``order_id|payment_id``."""
    if not settings.razorpay_key_secret:
        return False
    expected = _hmac_sha256(settings.razorpay_key_secret, f"{order_id}|{payment_id}".encode("utf-8"))
    return hmac.compare_digest(expected, signature)


def verify_webhook_signature(body: bytes, signature: str) -> bool:
    """Check ``X-Razorpay-Signature``: HMAC-SHA256 of the raw request body."""
    if not settings.razorpay_webhook_secret:
        return False
    expected = _hmac_sha256(settings.razorpay_webhook_secret, body)
    return hmac.compare_digest(expected, signature)
