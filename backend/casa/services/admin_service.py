"""Admin dashboard aggregates."""

import csv
import io
import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from casa.database import utcnow
from casa.models.booking import Booking
from casa.models.property import Property
from casa.models.user import UserProfile
from casa.services.booking_service import REVENUE_STATUSES, get_booking_stats

logger = logging.getLogger(__name__)


def occupancy_rate(active_bookings: int, total_properties: int) -> int:
    """Confirmed bookings per active property, as a whole percentage (half-up)."""
    if total_properties <= 0:
        return 0
    return (active_bookings * 200 + total_properties) // (total_properties * 2)


async def _count(db: AsyncSession, model, *conditions) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar_one()


async def get_dashboard_stats(db: AsyncSession, now: datetime | None = None) -> dict:
    """Headline numbers. Revenue counts confirmed and completed bookings only."""
    now = now or utcnow()
    month_start = datetime(now.year, now.month, 1)  # naive UTC

    total_properties = await _count(db, Property, Property.is_active.is_(True))
    total_users = await _count(db, UserProfile)
    stats = await get_booking_stats(db)

    monthly_result = await db.execute(
        select(func.coalesce(func.sum(Booking.total_amount_paise), 0)).where(
            Booking.status.in_(REVENUE_STATUSES),
            Booking.created_at >= month_start,
        )
    )

    return {
        "total_properties": total_properties,
        "total_bookings": stats["total"],
        "total_users": total_users,
        "total_revenue": stats["revenue"],
        "monthly_revenue": int(monthly_result.scalar_one()),
        "pending_bookings": stats["pending"],
        "active_bookings": stats["confirmed"],
        "completed_bookings": stats["completed"],
        "cancelled_bookings": stats["cancelled"],
        "occupancy_rate": occupancy_rate(stats["confirmed"], total_properties),
    }


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

EXPORT_COLUMNS = {
    "properties": [
        "id", "name", "location", "category", "aesthetic", "guests",
        "bedrooms", "bathrooms", "price_per_night_paise", "is_active", "created_at",
    ],
    "bookings": [
        "id", "confirmation_code", "property", "guest_phone", "check_in", "check_out",
        "guests", "pets", "total_amount_paise", "status", "payment_status", "created_at",
    ],
    "users": [
        "id", "phone", "full_name", "email", "role", "is_active", "is_verified", "created_at",
    ],
}


def _booking_row(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "confirmation_code": booking.confirmation_code,
        "property": booking.property.name if booking.property else "",
        "guest_phone": booking.user.phone if booking.user else "",
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "guests": booking.guests,
        "pets": booking.pets,
        "total_amount_paise": booking.total_amount_paise,
        "status": booking.status,
        "payment_status": booking.payment_status,
        "created_at": booking.created_at.isoformat(),
    }


def _plain_row(obj, columns: list[str]) -> dict:
    row = {}
    for column in columns:
        value = getattr(obj, column)
        row[column] = value.isoformat() if isinstance(value, datetime) else value
    return row


async def export_csv(db: AsyncSession, kind: str) -> str:
    """Render every row of ``kind`` (properties, bookings or users) as CSV, newest first."""
    columns = EXPORT_COLUMNS[kind]
    if kind == "bookings":
        result = await db.execute(select(Booking).order_by(Booking.created_at.desc()))
        rows = [_booking_row(b) for b in result.scalars().all()]
    else:
        model = Property if kind == "properties" else UserProfile
        result = await db.execute(select(model).order_by(model.created_at.desc()))
        rows = [_plain_row(obj, columns) for obj in result.scalars().all()]

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns)
    writer.writeheader()
    writer.writerows(rows)
    logger.info("Exported %d %s rows", len(rows), kind)
    return buffer.getvalue()
