"""Current-user API — profile, preferences, favorites, activity, and history."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_user, get_db
from casa.models.user import UserProfile
from casa.schemas.auth import UserResponse
from casa.schemas.booking import BookingDetailResponse
from casa.schemas.user import (
    ActivityResponse,
    FavoriteResponse,
    FavoriteStatusResponse,
    ProfileUpdate,
    UserPreferences,
)
from casa.services import booking_service, user_service

router = APIRouter(prefix="/api/v1/users/me", tags=["users"])


@router.patch("", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> UserResponse:
    user = await user_service.update_profile(db, current_user, body)
    return UserResponse.model_validate(user)


@router.get("/preferences", response_model=UserPreferences)
async def get_preferences(current_user: UserProfile = Depends(get_current_user)) -> UserPreferences:
    return user_service.get_preferences(current_user)


@router.put("/preferences", response_model=UserPreferences)
async def update_preferences(
    body: UserPreferences,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> UserPreferences:
    return await user_service.update_preferences(db, current_user, body)


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


@router.get("/favorites", response_model=list[FavoriteResponse])
async def list_favorites(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> list[FavoriteResponse]:
    favorites = await user_service.list_favorites(db, current_user.id)
    return [FavoriteResponse.model_validate(f) for f in favorites]


@router.get("/favorites/{property_id}", response_model=FavoriteStatusResponse)
async def favorite_status(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> FavoriteStatusResponse:
    return FavoriteStatusResponse(
        property_id=property_id,
        is_favorite=await user_service.is_favorite(db, current_user.id, property_id),
    )


@router.put("/favorites/{property_id}", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> FavoriteResponse:
    favorite = await user_service.add_favorite(db, current_user.id, property_id)
    return FavoriteResponse.model_validate(favorite)


@router.delete("/favorites/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> None:
    await user_service.remove_favorite(db, current_user.id, property_id)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@router.get("/activity", response_model=list[ActivityResponse])
async def list_activity(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> list[ActivityResponse]:
    activity = await user_service.list_activity(db, current_user.id, limit=limit)
    return [ActivityResponse.model_validate(a) for a in activity]


@router.get("/bookings", response_model=list[BookingDetailResponse])
async def booking_history(
    db: AsyncSession = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> list[BookingDetailResponse]:
    """All of the user's bookings, newest first."""
    bookings, _total = await booking_service.list_user_bookings(db, current_user.id, limit=1000)
    return [BookingDetailResponse.model_validate(b) for b in bookings]
