"""Properties API routes — public browsing, availability, and admin maintenance."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_admin, get_db
from casa.config import settings
from casa.models.user import UserProfile
from casa.schemas.property import (
    AvailabilityResponse,
    BookedRange,
    PropertyCreate,
    PropertyFilter,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from casa.services import booking_service, property_service

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


def _as_list(items) -> PropertyListResponse:
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get("", response_model=PropertyListResponse, summary="List active properties")
async def list_properties(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    items, total = await property_service.list_properties(db, skip=skip, limit=limit)
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get("/search", response_model=PropertyListResponse, summary="Free-text property search")
async def search_properties(
    q: str = Query(..., min_length=1, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    return _as_list(await property_service.search_properties(db, q))


@router.get("/filter", response_model=PropertyListResponse, summary="Filter properties")
async def filter_properties(
    filters: PropertyFilter = Depends(),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Filter by price range, capacity, bedrooms, category, aesthetic, or location."""
    if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="min_price must not exceed max_price",
        )
    return _as_list(await property_service.filter_properties(db, filters))


@router.get("/categories", response_model=list[str])
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[str]:
    return await property_service.get_categories(db)


@router.get("/aesthetics", response_model=list[str])
async def list_aesthetics(db: AsyncSession = Depends(get_db)) -> list[str]:
    return await property_service.get_aesthetics(db)


@router.get("/locations", response_model=list[str])
async def list_locations(db: AsyncSession = Depends(get_db)) -> list[str]:
    return await property_service.get_locations(db)


@router.get("/category/{category}", response_model=PropertyListResponse)
async def list_by_category(category: str, db: AsyncSession = Depends(get_db)) -> PropertyListResponse:
    return _as_list(await property_service.list_by_category(db, category))


@router.get("/aesthetic/{aesthetic}", response_model=PropertyListResponse)
async def list_by_aesthetic(aesthetic: str, db: AsyncSession = Depends(get_db)) -> PropertyListResponse:
    return _as_list(await property_service.list_by_aesthetic(db, aesthetic))


@router.get("/{property_id}", response_model=PropertyResponse, summary="Get property details")
async def get_property(property_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> PropertyResponse:
    prop = await property_service.get_property(db, property_id)
    return PropertyResponse.model_validate(prop)


@router.get("/{property_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Whether the property is free for ``[check_in, check_out)``."""
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out must be after check_in",
        )
    await property_service.get_property(db, property_id)
    result = await booking_service.check_availability(db, property_id, check_in, check_out)
    return AvailabilityResponse(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        available=result.available,
        conflicts=[BookedRange(check_in=b.check_in, check_out=b.check_out, status=b.status) for b in result.conflicts],
    )


@router.get("/{property_id}/booked-dates", response_model=list[BookedRange])
async def booked_dates(
    property_id: uuid.UUID,
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[BookedRange]:
    """Blocked ranges for a calendar view."""
    await property_service.get_property(db, property_id)
    bookings = await booking_service.get_booked_ranges(db, property_id, start, end)
    return [BookedRange(check_in=b.check_in, check_out=b.check_out, status=b.status) for b in bookings]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED, summary="Create a property")
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> PropertyResponse:
    prop = await property_service.create_property(db, body)
    return PropertyResponse.model_validate(prop)


@router.patch("/{property_id}", response_model=PropertyResponse, summary="Update a property")
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> PropertyResponse:
    prop = await property_service.update_property(db, property_id, body)
    return PropertyResponse.model_validate(prop)


@router.post(
    "/{property_id}/images",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a property image",
)
async def upload_property_image(
    property_id: uuid.UUID,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> PropertyResponse:
    """Store the image and append its public URL to the property's gallery."""
    # One byte past the limit is enough to reject oversized uploads
    data = await file.read(settings.max_image_upload_bytes + 1)
    prop = await property_service.add_property_image(
        db, property_id, file.filename or "", file.content_type, data
    )
    return PropertyResponse.model_validate(prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Deactivate a property")
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: UserProfile = Depends(get_current_admin),
) -> None:
    """Soft delete. Existing bookings keep their property."""
    await property_service.deactivate_property(db, property_id)
