"""Property service — catalogue browsing, search, and admin maintenance."""

import asyncio
import logging
import mimetypes
import time
import uuid
from pathlib import Path, PurePath

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from casa.config import settings
from casa.database import LIKE_ESCAPE, contains_pattern
from casa.exceptions import NotFoundError, ValidationError
from casa.models.property import Property
from casa.schemas.property import PropertyCreate, PropertyFilter, PropertyUpdate

logger = logging.getLogger(__name__)


async def list_properties(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    include_inactive: bool = False,
) -> tuple[list[Property], int]:
    """Return a page of properties, newest first, and the total count."""
    conditions = [] if include_inactive else [Property.is_active.is_(True)]

    total_result = await db.execute(select(func.count()).select_from(Property).where(*conditions))
    result = await db.execute(
        select(Property).where(*conditions).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total_result.scalar_one()


async def get_property(db: AsyncSession, property_id: uuid.UUID, include_inactive: bool = False) -> Property:
    """Fetch a property or raise ``NotFoundError``. Inactive ones are hidden by default."""
    prop = await db.get(Property, property_id)
    if prop is None or (not prop.is_active and not include_inactive):
        raise NotFoundError("Property not found")
    return prop


async def list_by_category(db: AsyncSession, category: str) -> list[Property]:
    result = await db.execute(
        select(Property)
        .where(Property.is_active.is_(True), Property.category == category)
        .order_by(Property.price_per_night_paise.asc())
    )
    return list(result.scalars().all())


async def list_by_aesthetic(db: AsyncSession, aesthetic: str) -> list[Property]:
    result = await db.execute(
        select(Property)
        .where(Property.is_active.is_(True), Property.aesthetic == aesthetic)
        .order_by(Property.price_per_night_paise.asc())
    )
    return list(result.scalars().all())


async def search_properties(db: AsyncSession, query: str) -> list[Property]:
    """Case-insensitive match on name, location, or description."""
    pattern = contains_pattern(query.strip())
    result = await db.execute(
        select(Property)
        .where(
            Property.is_active.is_(True),
            or_(
                Property.name.ilike(pattern, escape=LIKE_ESCAPE),
                Property.location.ilike(pattern, escape=LIKE_ESCAPE),
                Property.description.ilike(pattern, escape=LIKE_ESCAPE),
            ),
        )
        .order_by(Property.name.asc())
    )
    return list(result.scalars().all())


async def filter_properties(db: AsyncSession, filters: PropertyFilter) -> list[Property]:
    """Apply every bound that is set; cheapest first."""
    query = select(Property).where(Property.is_active.is_(True))

    if filters.min_price is not None:
        query = query.where(Property.price_per_night_paise >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Property.price_per_night_paise <= filters.max_price)
    if filters.guests is not None:
        query = query.where(Property.guests >= filters.guests)
    if filters.bedrooms is not None:
        query = query.where(Property.bedrooms >= filters.bedrooms)
    if filters.category is not None:
        query = query.where(Property.category == filters.category)
    if filters.aesthetic is not None:
        query = query.where(Property.aesthetic == filters.aesthetic)
    if filters.location is not None:
        query = query.where(Property.location.ilike(contains_pattern(filters.location), escape=LIKE_ESCAPE))

    result = await db.execute(query.order_by(Property.price_per_night_paise.asc()))
    return list(result.scalars().all())


async def _distinct(db: AsyncSession, column) -> list[str]:
    result = await db.execute(
        select(column).where(Property.is_active.is_(True), column != "").distinct().order_by(column)
    )
    return list(result.scalars().all())


async def get_categories(db: AsyncSession) -> list[str]:
    return await _distinct(db, Property.category)


async def get_aesthetics(db: AsyncSession) -> list[str]:
    return await _distinct(db, Property.aesthetic)


async def get_locations(db: AsyncSession) -> list[str]:
    return await _distinct(db, Property.location)


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


async def create_property(db: AsyncSession, data: PropertyCreate) -> Property:
    prop = Property(**data.model_dump(mode="json"))
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    logger.info("Created property %s (%s)", prop.id, prop.name)
    return prop


async def update_property(db: AsyncSession, property_id: uuid.UUID, data: PropertyUpdate) -> Property:
    prop = await get_property(db, property_id, include_inactive=True)

    for field_name, value in data.model_dump(mode="json", exclude_unset=True).items():
        setattr(prop, field_name, value)

    await db.flush()
    await db.refresh(prop)
    logger.info("Updated property %s", prop.id)
    return prop


async def deactivate_property(db: AsyncSession, property_id: uuid.UUID) -> Property:
    """Soft delete: hide the property but keep it for existing bookings."""
    prop = await get_property(db, property_id, include_inactive=True)
    prop.is_active = False
    await db.flush()
    await db.refresh(prop)
    logger.info("Deactivated property %s", prop.id)
    return prop


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


def _image_extension(filename: str, content_type: str | None) -> str:
    """Pick the stored file extension, or raise if the upload is not an image."""
    ext = PurePath(filename).suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return ext
    guessed = mimetypes.guess_extension((content_type or "").split(";")[0].strip()) or ""
    if (content_type or "").startswith("image/") and guessed.lower() in IMAGE_EXTENSIONS:
        return guessed.lower()
    raise ValidationError("Only JPEG, PNG, WebP, or GIF images can be uploaded")


async def add_property_image(
    db: AsyncSession,
    property_id: uuid.UUID,
    filename: str,
    content_type: str | None,
    data: bytes,
) -> Property:
    """Store an uploaded image under ``media_root`` and append its URL to the property.

    Raises:
        NotFoundError: Unknown property.
        ValidationError: Empty, oversized, or non-image upload.
    """
    prop = await get_property(db, property_id, include_inactive=True)

    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > settings.max_image_upload_bytes:
        raise ValidationError(f"Images are limited to {settings.max_image_upload_bytes} bytes")
    ext = _image_extension(filename, content_type)

    name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"
    target = Path(settings.media_root) / "properties" / name
    target.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_bytes, data)

    url = f"{settings.media_url.rstrip('/')}/properties/{name}"
    # Reassign so the JSON column is marked dirty
    prop.images = [*(prop.images or []), url]
    await db.flush()
    await db.refresh(prop)
    logger.info("Stored image %s for property %s (%d bytes)", url, prop.id, len(data))
    return prop
