"""Admin API — dashboard numbers, booking management, users, and suggestion history."""

import uuid
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_admin, get_db
from casa.models.user import UserProfile
from casa.schemas.admin import DashboardStatsResponse, SuggestionRecord, UserListResponse
from casa.schemas.auth import UserResponse
from casa.schemas.booking import (
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
    ExpiredBookingsResponse,
)
from casa.schemas.payment import RefundRequest
from casa.schemas.property import PropertyListResponse, PropertyResponse
from casa.schemas.user import AdminUserUpdate
from casa.services import (
    admin_service,
    booking_service,
    payment_service,
    property_service,
    suggestion_service,
    user_service,
)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/dashboard", response_model=DashboardStatsResponse)
async def dashboard(
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> DashboardStatsResponse:
    return DashboardStatsResponse(**await admin_service.get_dashboard_stats(db))


@router.get("/export/{kind}", summary="Download a CSV export")
async def export_csv(
    kind: Literal["properties", "bookings", "users"],
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> Response:
    content = await admin_service.export_csv(db, kind)
    return Response(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{kind}.csv"'},
    )


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


@router.get("/bookings", response_model=BookingListResponse)
async def search_bookings(
    user_id: uuid.UUID | None = Query(None),
    property_id: uuid.UUID | None = Query(None),
    status_filter: BookingStatus | None = Query(None, alias="status"),
    date_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    date_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> BookingListResponse:
    items, total = await booking_service.search_bookings(
        db,
        user_id=user_id,
        property_id=property_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return BookingListResponse(
        items=[BookingDetailResponse.model_validate(b) for b in items],
        total=total,
    )


@router.get("/properties/{property_id}/bookings", response_model=list[BookingDetailResponse])
async def property_bookings(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> list[BookingDetailResponse]:
    bookings = await booking_service.get_property_bookings(db, property_id)
    return [BookingDetailResponse.model_validate(b) for b in bookings]


@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(get_current_admin),
) -> BookingResponse:
    """Move a booking along its lifecycle. Invalid moves answer 409."""
    if body.status == "cancelled":
        booking = await booking_service.cancel_booking(db, booking_id, admin, body.reason or "cancelled_by_admin")
    else:
        booking = await booking_service.get_booking(db, booking_id)
        if body.status == "confirmed":
            booking = await booking_service.confirm_booking(db, booking)
        else:
            booking = await booking_service.update_status(db, booking, body.status, body.reason)
    return BookingResponse.model_validate(booking)


@router.post("/bookings/{booking_id}/refund", response_model=BookingResponse)
async def refund_booking(
    booking_id: uuid.UUID,
    body: RefundRequest | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> BookingResponse:
    booking = await payment_service.refund_booking(
        db,
        booking_id,
        amount_paise=body.amount_paise if body else None,
        reason=body.reason if body else None,
    )
    return BookingResponse.model_validate(booking)


@router.post("/bookings/expire", response_model=ExpiredBookingsResponse)
async def expire_bookings(
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> ExpiredBookingsResponse:
    """Release pending bookings whose payment window has passed."""
    expired = await booking_service.expire_stale_bookings(db)
    return ExpiredBookingsResponse(expired=len(expired), booking_ids=[b.id for b in expired])


# ---------------------------------------------------------------------------
# Properties & users
# ---------------------------------------------------------------------------


@router.get("/properties", response_model=PropertyListResponse)
async def list_all_properties(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> PropertyListResponse:
    """All properties, including deactivated ones."""
    items, total = await property_service.list_properties(db, skip=skip, limit=limit, include_inactive=True)
    return PropertyListResponse(items=[PropertyResponse.model_validate(p) for p in items], total=total)


@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: str | None = Query(None, max_length=100),
    role: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> UserListResponse:
    items, total = await user_service.list_users(db, search=search, role=role, skip=skip, limit=limit)
    return UserListResponse(items=[UserResponse.model_validate(u) for u in items], total=total)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> UserResponse:
    user = await user_service.admin_update_user(db, user_id, body)
    return UserResponse.model_validate(user)


@router.get("/suggestions", response_model=list[SuggestionRecord])
async def suggestion_history(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> list[SuggestionRecord]:
    suggestions = await suggestion_service.list_suggestions(db, limit=limit)
    return [
        SuggestionRecord(
            id=s.id,
            suggested_property_id=s.suggested_property_id,
            property_name=s.property.name if s.property is not None else None,
            user_preferences=s.user_preferences,
            created_at=s.created_at,
        )
        for s in suggestions
    ]
