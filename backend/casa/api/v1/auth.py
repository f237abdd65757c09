"""Auth API router — WhatsApp OTP request/verify, token refresh, me."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_current_user, get_db
from casa.models.user import UserProfile
from casa.schemas.auth import (
    AuthResponse,
    OTPRequest,
    OTPSentResponse,
    OTPVerifyRequest,
    RefreshRequest,
    TokenResponse,
    UserResponse,
)
from casa.services import otp_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


async def _send_otp(db: AsyncSession, body: OTPRequest) -> OTPSentResponse:
    dispatch = await otp_service.request_otp(db, body.phone, body.purpose)
    return OTPSentResponse(
        message="OTP sent to your WhatsApp",
        phone=dispatch.phone,
        expires_at=dispatch.expires_at,
        delivery_status=dispatch.delivery_status,
    )


@router.post("/otp/request", response_model=OTPSentResponse, status_code=status.HTTP_202_ACCEPTED)
async def request_otp(body: OTPRequest, db: AsyncSession = Depends(get_db)) -> OTPSentResponse:
    """Send a one-time code to the phone number."""
    return await _send_otp(db, body)


@router.post("/otp/resend", response_model=OTPSentResponse, status_code=status.HTTP_202_ACCEPTED)
async def resend_otp(body: OTPRequest, db: AsyncSession = Depends(get_db)) -> OTPSentResponse:
    """Invalidate outstanding codes for the phone and send a new one."""
    return await _send_otp(db, body)


@router.post("/otp/verify", response_model=AuthResponse)
async def verify_otp(
    body: OTPVerifyRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Verify a code, creating the profile on first login, and issue tokens."""
    login = await otp_service.verify_otp(
        db,
        body.phone,
        body.otp,
        body.purpose,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return AuthResponse(
        user=UserResponse.model_validate(login.user),
        tokens=TokenResponse(**login.tokens),
        is_new_user=login.is_new_user,
        message="Welcome to Infiniti Casa!" if login.is_new_user else "Welcome back!",
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    tokens = await otp_service.refresh_tokens(db, body.refresh_token)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def me(current_user: UserProfile = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated profile."""
    return UserResponse.model_validate(current_user)
