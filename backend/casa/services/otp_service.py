"""OTP service — phone verification codes and token issuance."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from jose import JWTError
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casa.auth.jwt import REFRESH, create_token_pair, decode_token
from casa.auth.otp import generate_code, hash_code, verify_code
from casa.config import settings
from casa.database import utcnow
from casa.exceptions import AuthenticationError, NotFoundError, OTPVerificationError
from casa.models.otp import OTPVerification
from casa.models.user import UserProfile
from casa.notifications import whatsapp
from casa.services import user_service

logger = logging.getLogger(__name__)


@dataclass
class OTPDispatch:
    phone: str
    expires_at: datetime
    delivery_status: str


@dataclass
class VerifiedLogin:
    user: UserProfile
    tokens: dict[str, str]
    is_new_user: bool


async def request_otp(db: AsyncSession, phone: str, purpose: str = "login") -> OTPDispatch:
    """Issue a fresh code for ``phone`` and send it over WhatsApp.

    Earlier unused codes for the same phone and purpose are discarded, so
    this doubles as the resend operation. Only the bcrypt hash is stored.
    """
    await db.execute(
        delete(OTPVerification).where(
            OTPVerification.phone == phone,
            OTPVerification.purpose == purpose,
            OTPVerification.is_used.is_(False),
        )
    )

    code = generate_code()
    expires_at = utcnow() + timedelta(minutes=settings.otp_expire_minutes)
    db.add(
        OTPVerification(
            phone=phone,
            code_hash=hash_code(code),
            purpose=purpose,
            expires_at=expires_at,
        )
    )
    await db.flush()

    if settings.debug:
        logger.debug("OTP for %s (%s): %s", phone, purpose, code)

    delivery_status = await whatsapp.send_otp(phone, code, purpose)
    logger.info("Issued %s OTP for %s, delivery %s", purpose, phone, delivery_status)
    return OTPDispatch(phone=phone, expires_at=expires_at, delivery_status=delivery_status)


async def _consume_matching_code(db: AsyncSession, phone: str, code: str, purpose: str) -> None:
    now = utcnow()
    result = await db.execute(
        select(OTPVerification)
        .where(
            OTPVerification.phone == phone,
            OTPVerification.purpose == purpose,
            OTPVerification.is_used.is_(False),
            OTPVerification.expires_at > now,
        )
        .order_by(OTPVerification.created_at.desc())
    )
    match = next(
        (row for row in result.scalars().all() if verify_code(code, row.code_hash)),
        None,
    )
    if match is None:
        raise OTPVerificationError()

    # Conditional update: a concurrent verification of the same code sees
    # rowcount 0 and fails.
    consumed = await db.execute(
        update(OTPVerification)
        .where(OTPVerification.id == match.id, OTPVerification.is_used.is_(False))
        .values(is_used=True, used_at=now)
    )
    if consumed.rowcount != 1:
        raise OTPVerificationError()


async def verify_otp(
    db: AsyncSession,
    phone: str,
    code: str,
    purpose: str = "login",
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> VerifiedLogin:
    """Accept a code that matches, is unused, and has not expired.

    On success the profile is created (first login) or marked verified, the
    login is written to the activity log, and a JWT pair is issued.

    Raises:
        OTPVerificationError: No unused, unexpired code matches.
        AuthenticationError: The profile exists but is deactivated.
    """
    await _consume_matching_code(db, phone, code, purpose)

    user = await user_service.get_user_by_phone(db, phone)
    is_new_user = user is None
    if user is None:
        user = UserProfile(phone=phone, is_verified=True)
        db.add(user)
        logger.info("Created profile for %s", phone)
    else:
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        user.is_verified = True

    await db.flush()
    await db.refresh(user)

    await user_service.log_activity(
        db,
        user.id,
        "login" if purpose == "login" else f"otp_{purpose}",
        {"is_new_user": is_new_user},
        ip_address=ip_address,
        user_agent=user_agent,
    )

    tokens = create_token_pair(str(user.id), role=user.role)
    return VerifiedLogin(user=user, tokens=tokens, is_new_user=is_new_user)


async def refresh_tokens(db: AsyncSession, refresh_token: str) -> dict[str, str]:
    """Exchange a valid refresh token for a new token pair."""
    try:
        payload = decode_token(refresh_token, expected_type=REFRESH)
        user_id = payload.get("sub")
    except JWTError as exc:
        raise AuthenticationError("Invalid refresh token") from exc

    if user_id is None:
        raise AuthenticationError("Invalid refresh token")

    try:
        user = await user_service.get_user(db, uuid.UUID(user_id))
    except (ValueError, NotFoundError) as exc:
        raise AuthenticationError("User not found or inactive") from exc
    if not user.is_active:
        raise AuthenticationError("User not found or inactive")

    return create_token_pair(str(user.id), role=user.role)
