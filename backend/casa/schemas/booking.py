"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from casa.schemas.property import PropertySummary

BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]


class GuestDetails(BaseModel):
    """Contact details of the lead guest, stored with the booking."""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=10, max_length=20)
    arrival_time: str | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _StayRequest(BaseModel):
    property_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int = Field(1, ge=1)
    pets: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_dates(self) -> "_StayRequest":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class QuoteRequest(_StayRequest):
    """Price a stay without creating a booking."""


class BookingCreate(_StayRequest):
    """Schema for creating a new booking. Prices are computed server-side."""

    guest_details: GuestDetails
    special_requests: str | None = Field(None, max_length=2000)


class BookingCancel(BaseModel):
    """Optional reason supplied when cancelling."""

    reason: str | None = Field(None, max_length=255)


class BookingStatusUpdate(BaseModel):
    """Admin status change."""

    status: BookingStatus
    reason: str | None = Field(None, max_length=255)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class QuoteResponse(BaseModel):
    """Price breakdown in paise."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int
    pets: int
    nights: int
    nightly_rate: int
    subtotal: int
    service_fee: int
    pet_fee: int
    total: int
    currency: str = "INR"


class BookingResponse(BaseModel):
    """Standard booking response returned from booking operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    user_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int
    pets: int
    nightly_rate_paise: int
    subtotal_paise: int
    service_fee_paise: int
    pet_fee_paise: int
    total_amount_paise: int
    status: str
    payment_status: str
    confirmation_code: str
    special_requests: str | None = None
    guest_details: GuestDetails
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with the property summary, for detail and list views."""

    property: PropertySummary | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingDetailResponse]
    total: int


class BookingStatsResponse(BaseModel):
    """Booking counts per status and realised revenue (paise)."""

    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    revenue: int


class ExpiredBookingsResponse(BaseModel):
    """Result of releasing stale unpaid holds."""

    expired: int
    booking_ids: list[uuid.UUID]
