"""Pydantic v2 request/response schemas for phone OTP authentication."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from casa.auth.otp import normalize_phone

OTPPurpose = Literal["login", "booking", "verification"]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _PhoneRequest(BaseModel):
    phone: str = Field(..., min_length=10, max_length=20)

    @field_validator("phone")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_phone(value)


class OTPRequest(_PhoneRequest):
    """Ask for a code to be sent to a phone number."""

    purpose: OTPPurpose = "login"


class OTPVerifyRequest(_PhoneRequest):
    """Submit the code received on the phone."""

    otp: str = Field(..., pattern=r"^\d{4,8}$")
    purpose: OTPPurpose = "login"


class RefreshRequest(BaseModel):
    """Schema for token refresh."""

    refresh_token: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class OTPSentResponse(BaseModel):
    """Result of an OTP request. ``expires_at`` is naive UTC."""

    message: str
    phone: str
    expires_at: datetime
    delivery_status: str


class TokenResponse(BaseModel):
    """JWT token pair returned on successful verification."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Public profile information."""

    id: uuid.UUID
    phone: str
    full_name: str | None = None
    email: str | None = None
    bio: str | None = None
    profile_image_url: str | None = None
    preferred_language: str
    marketing_consent: bool
    newsletter_subscribed: bool
    preferences: dict
    role: str
    is_active: bool
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Profile + tokens returned after a successful OTP verification."""

    user: UserResponse
    tokens: TokenResponse
    is_new_user: bool
    message: str


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
