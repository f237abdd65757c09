"""Booking and payment models — reservations and their gateway attempts."""

import uuid
from datetime import date, datetime

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casa.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation linking a user to a property for a half-open date range."""

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests: Mapped[int] = mapped_column(Integer, default=1)
    pets: Mapped[int] = mapped_column(Integer, default=0)

    # Price breakdown frozen at booking time (paise)
    nightly_rate_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    service_fee_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    pet_fee_paise: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        index=True,
    )  # pending, confirmed, completed, cancelled
    payment_status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
    )  # pending, completed, failed, refunded
    confirmation_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    guest_details: Mapped[dict] = mapped_column(JSON, default=dict)  # GuestDetails
    cancellation_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    user: Mapped["UserProfile"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    payments: Mapped[list["BookingPayment"]] = relationship(
        back_populates="booking",
        lazy="selectin",
        order_by="BookingPayment.created_at",
    )

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
        Index("ix_bookings_check_in", "check_in"),
        Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, user_id={self.user_id}, status={self.status})>"
        )


class BookingPayment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One payment attempt for a booking through a specific gateway."""

    __tablename__ = "booking_payments"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gateway: Mapped[str] = mapped_column(String(20), nullable=False)  # stripe, razorpay
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    provider_order_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    provider_payment_id: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    amount_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_paise: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    gateway_response: Mapped[dict] = mapped_column(JSON, default=dict)

    # Relationships
    booking: Mapped["Booking"] = relationship(back_populates="payments", lazy="selectin")

    def __repr__(self) -> str:
        return f"<BookingPayment(id={self.id}, booking_id={self.booking_id}, gateway={self.gateway!r}, status={self.status})>"
