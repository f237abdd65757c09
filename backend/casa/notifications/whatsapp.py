"""WhatsApp Cloud API client for OTP delivery and booking notifications.

Messages are plain text. Sending never raises: a missing configuration is
reported as ``"skipped"`` and a transport or API error as ``"failed"``, so
callers can fire notifications from inside a booking or OTP transaction
without risking a rollback.
"""

import logging
from datetime import date

import httpx

from casa.config import settings

logger = logging.getLogger(__name__)

SENT = "sent"
SKIPPED = "skipped"
FAILED = "failed"

TEMPLATES = {
    "otp": (
        "Your Infiniti Casa {purpose} code is {code}. "
        "It expires in {minutes} minutes. Do not share it with anyone."
    ),
    "booking_confirmation": (
        "Hi {guest_name}, your stay at {property_name} is confirmed!\n\n"
        "Confirmation code: {confirmation_code}\n"
        "Check-in: {check_in}\n"
        "Check-out: {check_out}\n"
        "Total paid: {total}\n\n"
        "We look forward to hosting you."
    ),
    "booking_cancellation": (
        "Hi {guest_name}, your booking {confirmation_code} at {property_name} "
        "({check_in} to {check_out}) has been cancelled.\n\n"
        "Reply to this message if you have any questions."
    ),
}

_TIMEOUT = httpx.Timeout(10.0)


def format_inr(paise: int) -> str:
    """Render an amount in paise as rupees, e.g. ``₹20,832.00``."""
    return f"₹{paise // 100:,}.{paise % 100:02d}"


def _recipient(phone: str) -> str:
    # Cloud API expects digits only, country code included.
    return phone.lstrip("+")


async def send_text(phone: str, body: str) -> str:
    """Send a plain text message and return the delivery status."""
    if not settings.whatsapp_configured:
        logger.info("WhatsApp not configured, skipping message to %s", phone)
        return SKIPPED

    url = f"{settings.whatsapp_api_url.rstrip('/')}/{settings.whatsapp_phone_number_id}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": _recipient(phone),
        "type": "text",
        "text": {"body": body},
    }
    headers = {"Authorization": f"Bearer {settings.whatsapp_access_token}"}

    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
            response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            message_id = (response.json().get("messages") or [{}])[0].get("id")
    except (httpx.HTTPError, ValueError):
        logger.exception("WhatsApp delivery to %s failed", phone)
        return FAILED

    logger.info("WhatsApp message %s sent to %s", message_id, phone)
    return SENT


async def send_otp(phone: str, code: str, purpose: str) -> str:
    body = TEMPLATES["otp"].format(
        purpose=purpose,
        code=code,
        minutes=settings.otp_expire_minutes,
    )
    return await send_text(phone, body)


async def send_booking_confirmation(
    phone: str,
    guest_name: str,
    property_name: str,
    check_in: date,
    check_out: date,
    total_paise: int,
    confirmation_code: str,
) -> str:
    body = TEMPLATES["booking_confirmation"].format(
        guest_name=guest_name,
        property_name=property_name,
        confirmation_code=confirmation_code,
        check_in=check_in.isoformat(),
        check_out=check_out.isoformat(),
        total=format_inr(total_paise),
    )
    return await send_text(phone, body)


async def send_booking_cancellation(
    phone: str,
    guest_name: str,
    property_name: str,
    check_in: date,
    check_out: date,
    confirmation_code: str,
) -> str:
    body = TEMPLATES["booking_cancellation"].format(
        guest_name=guest_name,
        property_name=property_name,
        confirmation_code=confirmation_code,
        check_in=check_in.isoformat(),
        check_out=check_out.isoformat(),
    )
    return await send_text(phone, body)
