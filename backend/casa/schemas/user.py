"""Pydantic v2 schemas for profile, favorites, newsletter, and activity endpoints."""

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from casa.schemas.property import PropertySummary


class UserPreferences(BaseModel):
    """Typed profile preferences stored in the ``preferences`` JSON column."""

    notifications: bool = True
    language: str = "en"
    currency: str = "INR"
    favorite_categories: list[str] = Field(default_factory=list)
    whatsapp_updates: bool = True


class ProfileUpdate(BaseModel):
    """Self-service profile edit. All fields optional."""

    full_name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    bio: str | None = Field(None, max_length=2000)
    date_of_birth: date | None = None
    nationality: str | None = Field(None, max_length=100)
    profile_image_url: str | None = Field(None, max_length=512)
    preferred_language: str | None = Field(None, max_length=10)
    marketing_consent: bool | None = None
    newsletter_subscribed: bool | None = None


class AdminUserUpdate(BaseModel):
    """Admin-only account changes."""

    role: Literal["guest", "admin"] | None = None
    is_active: bool | None = None


class FavoriteResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    created_at: datetime
    property: PropertySummary | None = None

    model_config = ConfigDict(from_attributes=True)


class FavoriteStatusResponse(BaseModel):
    property_id: uuid.UUID
    is_favorite: bool


class ActivityResponse(BaseModel):
    id: uuid.UUID
    activity_type: str
    activity_data: dict
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NewsletterSubscribeRequest(BaseModel):
    email: EmailStr
    full_name: str | None = Field(None, max_length=255)
    source: str = Field("website", max_length=50)


class NewsletterUnsubscribeRequest(BaseModel):
    email: EmailStr


class NewsletterResponse(BaseModel):
    email: str
    full_name: str | None = None
    subscription_status: str
    subscription_source: str

    model_config = ConfigDict(from_attributes=True)
