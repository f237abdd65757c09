"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

# ---------------------------------------------------------------------------
# Typed content blocks (stored as JSON columns)
# ---------------------------------------------------------------------------


class PropertyFeatures(BaseModel):
    """Structured amenities and house rules of a property."""

    amenities: list[str] = Field(default_factory=list)
    pet_friendly: bool = False
    smoking_allowed: bool = False
    check_in_time: str = "14:00"
    check_out_time: str = "11:00"
    house_rules: list[str] = Field(default_factory=list)


class Testimonial(BaseModel):
    """A guest quote shown on the property page."""

    author: str = Field(..., min_length=1, max_length=255)
    text: str = Field(..., min_length=1)
    rating: int | None = Field(None, ge=1, le=5)
    source: str | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new property (admin)."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    guests: int = Field(..., ge=1)
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    price_per_night_paise: int = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    aesthetic: str = Field("", max_length=100)
    virtual_tour_url: HttpUrl | None = None
    video_url: HttpUrl | None = None
    images: list[str] = Field(default_factory=list)
    features: PropertyFeatures = Field(default_factory=PropertyFeatures)
    story: str = ""
    testimonials: list[Testimonial] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    is_active: bool = True


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    price_per_night_paise: int | None = Field(None, ge=0)
    category: str | None = Field(None, min_length=1, max_length=100)
    aesthetic: str | None = Field(None, max_length=100)
    virtual_tour_url: HttpUrl | None = None
    video_url: HttpUrl | None = None
    images: list[str] | None = None
    features: PropertyFeatures | None = None
    story: str | None = None
    testimonials: list[Testimonial] | None = None
    highlights: list[str] | None = None
    is_active: bool | None = None


class PropertyFilter(BaseModel):
    """Browse filters; every bound is optional."""

    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    category: str | None = None
    aesthetic: str | None = None
    location: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    name: str
    location: str
    description: str
    guests: int
    bedrooms: int
    bathrooms: int
    price_per_night_paise: int
    category: str
    aesthetic: str
    virtual_tour_url: str | None = None
    video_url: str | None = None
    images: list[str]
    features: PropertyFeatures
    story: str
    testimonials: list[Testimonial]
    highlights: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertySummary(BaseModel):
    """Compact property view embedded in bookings and favorites."""

    id: uuid.UUID
    name: str
    location: str
    price_per_night_paise: int
    images: list[str]

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int


class BookedRange(BaseModel):
    """A blocked half-open ``[check_in, check_out)`` range."""

    check_in: date
    check_out: date
    status: str


class AvailabilityResponse(BaseModel):
    """Whether a property is free for a date range."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    available: bool
    conflicts: list[BookedRange] = Field(default_factory=list)
