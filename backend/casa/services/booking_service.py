"""Booking service — availability, reservation lifecycle, and booking queries."""

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from casa.config import settings
from casa.database import utcnow
from casa.exceptions import (
    BookingConflictError,
    InvalidBookingTransition,
    NotFoundError,
    ValidationError,
)
from casa.models.booking import Booking
from casa.models.property import Property
from casa.models.user import UserProfile
from casa.notifications import whatsapp
from casa.schemas.booking import BookingCreate
from casa.services.pricing import BookingQuote, calculate_quote

logger = logging.getLogger(__name__)

# Allowed status moves. Anything not listed is rejected.
TRANSITIONS: dict[str, set[str]] = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

REVENUE_STATUSES = ("confirmed", "completed")


@dataclass
class AvailabilityResult:
    available: bool
    conflicts: list[Booking] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


async def check_availability(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> AvailabilityResult:
    """Find non-cancelled bookings overlapping the half-open ``[check_in, check_out)``.

    Two stays overlap when ``existing.check_in < check_out`` and
    ``existing.check_out > check_in``; back-to-back stays (one checks out the
    day the next checks in) do not conflict.
    """
    query = select(Booking).where(
        Booking.property_id == property_id,
        Booking.status != "cancelled",
        Booking.check_in < check_out,
        Booking.check_out > check_in,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query.order_by(Booking.check_in))
    conflicts = list(result.scalars().all())
    return AvailabilityResult(available=not conflicts, conflicts=conflicts)


async def get_booked_ranges(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[Booking]:
    """Non-cancelled bookings of a property, optionally clipped to a window."""
    query = select(Booking).where(
        Booking.property_id == property_id,
        Booking.status != "cancelled",
    )
    if start is not None:
        query = query.where(Booking.check_out > start)
    if end is not None:
        query = query.where(Booking.check_in < end)

    result = await db.execute(query.order_by(Booking.check_in))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def generate_confirmation_code() -> str:
    """Short human-friendly reference, e.g. ``IC7F3A91B2``."""
    return "IC" + secrets.token_hex(4).upper()


async def _get_bookable_property(db: AsyncSession, property_id: uuid.UUID, lock: bool = False) -> Property:
    query = select(Property).where(Property.id == property_id, Property.is_active.is_(True))
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


async def quote_stay(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    guests: int = 1,
    pets: int = 0,
) -> BookingQuote:
    """Price a stay at the property's current nightly rate."""
    prop = await _get_bookable_property(db, property_id)
    return calculate_quote(prop.price_per_night_paise, check_in, check_out, guests, pets)


async def create_booking(db: AsyncSession, user: UserProfile, data: BookingCreate) -> Booking:
    """Create a pending booking after re-checking availability.

    The property row is locked for the rest of the transaction, so two
    requests for the same property run their check-and-insert one after the
    other. The database exclusion constraint backs this up; if it fires the
    insert is reported as a booking conflict.

    Raises:
        NotFoundError: Property missing or inactive.
        ValidationError: Too many guests, or pets at a property that refuses them,
            or a check-in date in the past.
        BookingConflictError: The dates overlap an existing booking.
    """
    prop = await _get_bookable_property(db, data.property_id, lock=True)

    if data.check_in < date.today():
        raise ValidationError("Check-in date is in the past")
    if data.guests > prop.guests:
        raise ValidationError(f"{prop.name} accommodates at most {prop.guests} guests")
    if data.pets and not prop.pet_friendly:
        raise ValidationError(f"{prop.name} does not allow pets")

    availability = await check_availability(db, prop.id, data.check_in, data.check_out)
    if not availability.available:
        logger.info(
            "Booking conflict on property %s for %s..%s",
            prop.id,
            data.check_in,
            data.check_out,
        )
        raise BookingConflictError()

    quote = calculate_quote(
        prop.price_per_night_paise,
        data.check_in,
        data.check_out,
        data.guests,
        data.pets,
    )

    booking = Booking(
        property_id=prop.id,
        user_id=user.id,
        check_in=data.check_in,
        check_out=data.check_out,
        guests=data.guests,
        pets=data.pets,
        nightly_rate_paise=quote.nightly_rate,
        subtotal_paise=quote.subtotal,
        service_fee_paise=quote.service_fee,
        pet_fee_paise=quote.pet_fee,
        total_amount_paise=quote.total,
        status="pending",
        payment_status="pending",
        confirmation_code=generate_confirmation_code(),
        special_requests=data.special_requests,
        guest_details=data.guest_details.model_dump(mode="json"),
    )
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Insert rejected for property %s: %s", prop.id, exc.orig)
        raise BookingConflictError() from exc

    await db.refresh(booking)
    logger.info(
        "Created booking %s (%s) for user %s: %s nights, total %s paise",
        booking.id,
        booking.confirmation_code,
        user.id,
        quote.nights,
        quote.total,
    )
    return booking


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    """Fetch a booking by ID or raise ``NotFoundError``."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


async def get_booking_for_user(db: AsyncSession, booking_id: uuid.UUID, user: UserProfile) -> Booking:
    """Fetch a booking the user may see: their own, or any booking for admins.

    Other users' bookings are reported as missing rather than forbidden.
    """
    booking = await get_booking(db, booking_id)
    if booking.user_id != user.id and not user.is_admin:
        raise NotFoundError("Booking not found")
    return booking


async def search_bookings(
    db: AsyncSession,
    *,
    user_id: uuid.UUID | None = None,
    property_id: uuid.UUID | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Return a page of bookings (newest first) and the total match count."""
    conditions = []
    if user_id is not None:
        conditions.append(Booking.user_id == user_id)
    if property_id is not None:
        conditions.append(Booking.property_id == property_id)
    if status is not None:
        conditions.append(Booking.status == status)
    if date_from is not None:
        conditions.append(Booking.check_in >= date_from)
    if date_to is not None:
        conditions.append(Booking.check_in <= date_to)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*conditions))
    total = total_result.scalar_one()

    items_query = select(Booking).where(*conditions).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    return list(result.scalars().all()), total


async def list_user_bookings(
    db: AsyncSession, user_id: uuid.UUID, skip: int = 0, limit: int = 20
) -> tuple[list[Booking], int]:
    return await search_bookings(db, user_id=user_id, skip=skip, limit=limit)


async def get_upcoming_bookings(db: AsyncSession, user_id: uuid.UUID, today: date | None = None) -> list[Booking]:
    """Non-cancelled bookings starting today or later, soonest first."""
    today = today or date.today()
    result = await db.execute(
        select(Booking)
        .where(
            Booking.user_id == user_id,
            Booking.check_in >= today,
            Booking.status != "cancelled",
        )
        .order_by(Booking.check_in.asc())
    )
    return list(result.scalars().all())


async def get_past_bookings(db: AsyncSession, user_id: uuid.UUID, today: date | None = None) -> list[Booking]:
    """Bookings whose stay has ended, most recent first."""
    today = today or date.today()
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id, Booking.check_out < today)
        .order_by(Booking.check_out.desc())
    )
    return list(result.scalars().all())


async def get_property_bookings(db: AsyncSession, property_id: uuid.UUID) -> list[Booking]:
    result = await db.execute(
        select(Booking).where(Booking.property_id == property_id).order_by(Booking.check_in.asc())
    )
    return list(result.scalars().all())


async def get_booking_stats(db: AsyncSession, user_id: uuid.UUID | None = None) -> dict:
    """Count bookings per status and sum revenue of confirmed and completed ones."""
    conditions = [Booking.user_id == user_id] if user_id is not None else []

    result = await db.execute(
        select(Booking.status, func.count(), func.coalesce(func.sum(Booking.total_amount_paise), 0))
        .where(*conditions)
        .group_by(Booking.status)
    )

    stats = {"total": 0, "pending": 0, "confirmed": 0, "completed": 0, "cancelled": 0, "revenue": 0}
    for status, count, amount in result.all():
        stats["total"] += count
        if status in stats:
            stats[status] = count
        if status in REVENUE_STATUSES:
            stats["revenue"] += int(amount)
    return stats


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def _notify_cancellation(booking: Booking) -> None:
    details = booking.guest_details or {}
    phone = booking.user.phone if booking.user is not None else details.get("phone")
    if not phone:
        return
    await whatsapp.send_booking_cancellation(
        phone=phone,
        guest_name=details.get("full_name") or "guest",
        property_name=booking.property.name if booking.property is not None else "your stay",
        check_in=booking.check_in,
        check_out=booking.check_out,
        confirmation_code=booking.confirmation_code,
    )


async def notify_confirmation(booking: Booking) -> None:
    """Send the WhatsApp confirmation for a confirmed booking."""
    details = booking.guest_details or {}
    phone = booking.user.phone if booking.user is not None else details.get("phone")
    if not phone:
        return
    await whatsapp.send_booking_confirmation(
        phone=phone,
        guest_name=details.get("full_name") or "guest",
        property_name=booking.property.name if booking.property is not None else "your stay",
        check_in=booking.check_in,
        check_out=booking.check_out,
        total_paise=booking.total_amount_paise,
        confirmation_code=booking.confirmation_code,
    )


async def update_status(
    db: AsyncSession,
    booking: Booking,
    new_status: str,
    reason: str | None = None,
) -> Booking:
    """Move a booking to ``new_status`` if the lifecycle allows it.

    Asking for the status the booking already has is a no-op, which makes
    repeated cancellations and duplicate payment confirmations safe.

    Raises:
        InvalidBookingTransition: The move is not allowed from the current status.
    """
    if booking.status == new_status:
        return booking

    if new_status not in TRANSITIONS.get(booking.status, set()):
        raise InvalidBookingTransition(f"Cannot change a {booking.status} booking to {new_status}")

    old_status = booking.status
    booking.status = new_status
    if new_status == "cancelled":
        booking.cancelled_at = utcnow()
        booking.cancellation_reason = reason
    elif new_status == "confirmed":
        booking.payment_status = "completed"

    await db.flush()
    await db.refresh(booking)
    logger.info("Booking %s: %s -> %s", booking.id, old_status, new_status)
    return booking


async def cancel_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    user: UserProfile,
    reason: str | None = None,
) -> Booking:
    """Cancel a booking on behalf of its owner (or an admin).

    Cancelling an already-cancelled booking returns it unchanged.
    """
    booking = await get_booking_for_user(db, booking_id, user)
    if booking.status == "cancelled":
        return booking

    booking = await update_status(db, booking, "cancelled", reason or "cancelled_by_user")
    await _notify_cancellation(booking)
    return booking


async def confirm_booking(db: AsyncSession, booking: Booking) -> Booking:
    """Mark a booking confirmed and paid. Called after a verified payment."""
    was_confirmed = booking.status == "confirmed"
    booking = await update_status(db, booking, "confirmed")
    if not was_confirmed:
        await notify_confirmation(booking)
    return booking


async def complete_booking(db: AsyncSession, booking: Booking) -> Booking:
    return await update_status(db, booking, "completed")


async def expire_stale_bookings(db: AsyncSession, now: datetime | None = None) -> list[Booking]:
    """Cancel pending, unpaid bookings older than the payment hold window.

    Returns the bookings that were released.
    """
    cutoff = (now or utcnow()) - timedelta(minutes=settings.booking_hold_minutes)
    result = await db.execute(
        select(Booking).where(
            Booking.status == "pending",
            Booking.payment_status == "pending",
            Booking.created_at < cutoff,
        )
    )
    stale = list(result.scalars().all())

    for booking in stale:
        booking.status = "cancelled"
        booking.cancelled_at = utcnow()
        booking.cancellation_reason = "payment_timeout"
    if stale:
        await db.flush()
        for booking in stale:
            await db.refresh(booking)
        logger.info("Expired %d unpaid bookings created before %s", len(stale), cutoff)
    return stale
