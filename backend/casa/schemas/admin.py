"""Pydantic v2 schemas for the admin dashboard and suggestion helper."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from casa.schemas.auth import UserResponse


class DashboardStatsResponse(BaseModel):
    """Headline numbers for the admin dashboard. Money in paise."""

    total_properties: int
    total_bookings: int
    total_users: int
    total_revenue: int
    monthly_revenue: int
    pending_bookings: int
    active_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    occupancy_rate: int  # percent, rounded


class SuggestionRequest(BaseModel):
    """Answers from the "find my stay" questionnaire."""

    group_size: int = Field(..., ge=1, le=50)
    purpose: Literal["romantic", "business", "celebration", "cultural", "relaxation"]
    aesthetic: Literal["modern", "traditional", "artistic", "minimalist"]
    budget_paise: int = Field(..., ge=0)
    duration_nights: int | None = Field(None, ge=1)


class SuggestionResponse(BaseModel):
    property_id: uuid.UUID
    name: str
    category: str
    aesthetic: str
    guests: int
    price_per_night_paise: int
    score: int


class SuggestionRecord(BaseModel):
    id: uuid.UUID
    suggested_property_id: uuid.UUID
    property_name: str | None = None
    user_preferences: dict
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
