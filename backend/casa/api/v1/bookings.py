"""Bookings API router — quote, create, view, and cancel reservations.

Guests see only their own bookings; admins see all of them. Bookings of
other users answer 404, never 403.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_user, get_db
from casa.config import settings
from casa.models.user import UserProfile
from casa.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatsResponse,
    QuoteRequest,
    QuoteResponse,
)
from casa.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post("/quote", response_model=QuoteResponse, summary="Price a stay")
async def quote(body: QuoteRequest, db: AsyncSession = Depends(get_db)) -> QuoteResponse:
    """Return the price breakdown for a stay without reserving anything."""
    result = await booking_service.quote_stay(
        db, body.property_id, body.check_in, body.check_out, body.guests, body.pets
    )
    return QuoteResponse(
        property_id=body.property_id,
        check_in=body.check_in,
        check_out=body.check_out,
        guests=body.guests,
        pets=body.pets,
        nights=result.nights,
        nightly_rate=result.nightly_rate,
        subtotal=result.subtotal,
        service_fee=result.service_fee,
        pet_fee=result.pet_fee,
        total=result.total,
        currency=settings.currency,
    )


@router.post(
    "",
    response_model=BookingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingDetailResponse:
    """Reserve the dates as a pending booking awaiting payment.

    Prices are computed here from the property's current rate; the client
    never sends amounts.
    """
    booking = await booking_service.create_booking(db, current_user, body)
    return BookingDetailResponse.model_validate(booking)


@router.get("", response_model=BookingListResponse, summary="List my bookings")
async def list_my_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingListResponse:
    items, total = await booking_service.list_user_bookings(db, current_user.id, skip=skip, limit=limit)
    return BookingListResponse(
        items=[BookingDetailResponse.model_validate(b) for b in items],
        total=total,
    )


@router.get("/upcoming", response_model=list[BookingDetailResponse])
async def upcoming_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> list[BookingDetailResponse]:
    bookings = await booking_service.get_upcoming_bookings(db, current_user.id)
    return [BookingDetailResponse.model_validate(b) for b in bookings]


@router.get("/past", response_model=list[BookingDetailResponse])
async def past_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> list[BookingDetailResponse]:
    bookings = await booking_service.get_past_bookings(db, current_user.id)
    return [BookingDetailResponse.model_validate(b) for b in bookings]


@router.get("/stats", response_model=BookingStatsResponse)
async def my_booking_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingStatsResponse:
    stats = await booking_service.get_booking_stats(db, current_user.id)
    return BookingStatsResponse(**stats)


@router.get("/{booking_id}", response_model=BookingDetailResponse, summary="Get booking details")
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingDetailResponse:
    booking = await booking_service.get_booking_for_user(db, booking_id, current_user)
    return BookingDetailResponse.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingResponse, summary="Cancel a booking")
async def cancel_booking(
    booking_id: uuid.UUID,
    body: BookingCancel | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> BookingResponse:
    """Cancel a pending or confirmed booking. Repeating the call is harmless."""
    booking = await booking_service.cancel_booking(
        db, booking_id, current_user, body.reason if body else None
    )
    return BookingResponse.model_validate(booking)
