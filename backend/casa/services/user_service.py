"""User service — profiles, preferences, favorites, newsletter, and activity log."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from casa.database import LIKE_ESCAPE, contains_pattern
from casa.exceptions import ConflictError, NotFoundError
from casa.models.engagement import NewsletterSubscription, UserActivity, UserFavorite
from casa.models.property import Property
from casa.models.user import UserProfile
from casa.schemas.user import AdminUserUpdate, ProfileUpdate, UserPreferences

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


async def get_user_by_phone(db: AsyncSession, phone: str) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.phone == phone))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
    user = await db.get(UserProfile, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def update_profile(db: AsyncSession, user: UserProfile, data: ProfileUpdate) -> UserProfile:
    """Apply the fields present in ``data`` to the profile."""
    update_data = data.model_dump(exclude_unset=True)
    for field_name, value in update_data.items():
        setattr(user, field_name, value)

    await db.flush()
    await db.refresh(user)
    await log_activity(db, user.id, "profile_updated", {"fields": sorted(update_data)})
    return user


def get_preferences(user: UserProfile) -> UserPreferences:
    return UserPreferences.model_validate(user.preferences or {})


async def update_preferences(db: AsyncSession, user: UserProfile, preferences: UserPreferences) -> UserPreferences:
    user.preferences = preferences.model_dump(mode="json")
    await db.flush()
    await db.refresh(user)
    return get_preferences(user)


async def list_users(
    db: AsyncSession,
    search: str | None = None,
    role: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[UserProfile], int]:
    """Admin listing, newest first. ``search`` matches name, phone, or email."""
    conditions = []
    if role is not None:
        conditions.append(UserProfile.role == role)
    if search:
        pattern = contains_pattern(search)
        conditions.append(
            UserProfile.full_name.ilike(pattern, escape=LIKE_ESCAPE)
            | UserProfile.phone.ilike(pattern, escape=LIKE_ESCAPE)
            | UserProfile.email.ilike(pattern, escape=LIKE_ESCAPE)
        )

    total_result = await db.execute(select(func.count()).select_from(UserProfile).where(*conditions))
    result = await db.execute(
        select(UserProfile).where(*conditions).order_by(UserProfile.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total_result.scalar_one()


async def admin_update_user(db: AsyncSession, user_id: uuid.UUID, data: AdminUserUpdate) -> UserProfile:
    user = await get_user(db, user_id)
    for field_name, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field_name, value)
    await db.flush()
    await db.refresh(user)
    logger.info("Admin updated user %s: role=%s active=%s", user.id, user.role, user.is_active)
    return user


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


async def list_favorites(db: AsyncSession, user_id: uuid.UUID) -> list[UserFavorite]:
    result = await db.execute(
        select(UserFavorite).where(UserFavorite.user_id == user_id).order_by(UserFavorite.created_at.desc())
    )
    return list(result.scalars().all())


async def is_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(UserFavorite.id).where(
            UserFavorite.user_id == user_id,
            UserFavorite.property_id == property_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def add_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> UserFavorite:
    """Save a property for the user.

    Raises:
        NotFoundError: The property does not exist.
        ConflictError: It is already a favorite.
    """
    if await db.get(Property, property_id) is None:
        raise NotFoundError("Property not found")
    if await is_favorite(db, user_id, property_id):
        raise ConflictError("Property is already in favorites")

    favorite = UserFavorite(user_id=user_id, property_id=property_id)
    db.add(favorite)
    await db.flush()
    await db.refresh(favorite)
    await log_activity(db, user_id, "favorite_added", {"property_id": str(property_id)})
    return favorite


async def remove_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> None:
    result = await db.execute(
        select(UserFavorite).where(
            UserFavorite.user_id == user_id,
            UserFavorite.property_id == property_id,
        )
    )
    favorite = result.scalar_one_or_none()
    if favorite is None:
        raise NotFoundError("Favorite not found")

    await db.delete(favorite)
    await db.flush()
    await log_activity(db, user_id, "favorite_removed", {"property_id": str(property_id)})


# ---------------------------------------------------------------------------
# Newsletter
# ---------------------------------------------------------------------------


async def subscribe_newsletter(
    db: AsyncSession,
    email: str,
    full_name: str | None = None,
    source: str = "website",
) -> NewsletterSubscription:
    """Add an address to the list, reactivating it if it had unsubscribed."""
    email = email.lower()
    result = await db.execute(select(NewsletterSubscription).where(NewsletterSubscription.email == email))
    subscription = result.scalar_one_or_none()

    if subscription is None:
        subscription = NewsletterSubscription(
            email=email,
            full_name=full_name,
            subscription_status="active",
            subscription_source=source,
        )
        db.add(subscription)
        logger.info("New newsletter subscriber from %s", source)
    else:
        subscription.subscription_status = "active"
        if full_name:
            subscription.full_name = full_name

    await db.flush()
    await db.refresh(subscription)
    return subscription


async def unsubscribe_newsletter(db: AsyncSession, email: str) -> NewsletterSubscription:
    result = await db.execute(
        select(NewsletterSubscription).where(NewsletterSubscription.email == email.lower())
    )
    subscription = result.scalar_one_or_none()
    if subscription is None:
        raise NotFoundError("Subscription not found")

    subscription.subscription_status = "unsubscribed"
    await db.flush()
    await db.refresh(subscription)
    return subscription


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


async def log_activity(
    db: AsyncSession,
    user_id: uuid.UUID | None,
    activity_type: str,
    activity_data: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserActivity:
    """Append an entry to the activity log."""
    activity = UserActivity(
        user_id=user_id,
        activity_type=activity_type,
        activity_data=activity_data or {},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(activity)
    await db.flush()
    return activity


async def list_activity(db: AsyncSession, user_id: uuid.UUID, limit: int = 50) -> list[UserActivity]:
    result = await db.execute(
        select(UserActivity)
        .where(UserActivity.user_id == user_id)
        .order_by(UserActivity.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
