"""Tests for WhatsApp OTP login: issue, verify, replay, expiry, and refresh."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casa.auth.jwt import create_refresh_token, create_token_pair, decode_token
from casa.database import utcnow
from casa.exceptions import AuthenticationError, OTPVerificationError
from casa.models.engagement import UserActivity
from casa.models.otp import OTPVerification
from casa.notifications.whatsapp import SKIPPED
from casa.services import otp_service
from conftest import make_user

pytestmark = pytest.mark.asyncio

PHONE = "+919876543210"


async def _issue(db: AsyncSession, code: str, phone: str = PHONE, purpose: str = "login"):
    with patch("casa.services.otp_service.generate_code", return_value=code):
        return await otp_service.request_otp(db, phone, purpose)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestRequestOTP:
    async def test_stores_only_the_hash(self, db_session: AsyncSession):
        dispatch = await _issue(db_session, "482913")

        rows = (await db_session.execute(select(OTPVerification))).scalars().all()
        assert len(rows) == 1
        assert rows[0].code_hash != "482913"
        assert rows[0].is_used is False
        assert dispatch.phone == PHONE
        assert dispatch.expires_at > utcnow() + timedelta(minutes=9)
        # WhatsApp is not configured in tests
        assert dispatch.delivery_status == SKIPPED

    async def test_sends_code_over_whatsapp(self, db_session: AsyncSession):
        with patch("casa.notifications.whatsapp.send_otp", new_callable=AsyncMock, return_value="sent") as send:
            dispatch = await _issue(db_session, "482913")
        send.assert_awaited_once_with(PHONE, "482913", "login")
        assert dispatch.delivery_status == "sent"

    async def test_resend_invalidates_previous_code(self, db_session: AsyncSession):
        await _issue(db_session, "111111")
        await _issue(db_session, "222222")

        with pytest.raises(OTPVerificationError):
            await otp_service.verify_otp(db_session, PHONE, "111111")
        login = await otp_service.verify_otp(db_session, PHONE, "222222")
        assert login.user.phone == PHONE


class TestVerifyOTP:
    async def test_first_login_creates_profile(self, db_session: AsyncSession):
        await _issue(db_session, "482913")
        login = await otp_service.verify_otp(db_session, PHONE, "482913", ip_address="10.0.0.1")

        assert login.is_new_user is True
        assert login.user.is_verified is True
        assert login.user.role == "guest"
        payload = decode_token(login.tokens["access_token"], expected_type="access")
        assert payload["sub"] == str(login.user.id)

        activity = (await db_session.execute(select(UserActivity))).scalars().all()
        assert [a.activity_type for a in activity] == ["login"]
        assert activity[0].ip_address == "10.0.0.1"

    async def test_returning_user(self, db_session: AsyncSession):
        existing = await make_user(db_session, phone=PHONE)
        await _issue(db_session, "482913")
        login = await otp_service.verify_otp(db_session, PHONE, "482913")
        assert login.is_new_user is False
        assert login.user.id == existing.id

    async def test_code_cannot_be_replayed(self, db_session: AsyncSession):
        await _issue(db_session, "482913")
        await otp_service.verify_otp(db_session, PHONE, "482913")
        with pytest.raises(OTPVerificationError):
            await otp_service.verify_otp(db_session, PHONE, "482913")

    async def test_wrong_code(self, db_session: AsyncSession):
        await _issue(db_session, "482913")
        with pytest.raises(OTPVerificationError):
            await otp_service.verify_otp(db_session, PHONE, "000000")

    async def test_expired_code(self, db_session: AsyncSession):
        await _issue(db_session, "482913")
        await db_session.execute(
            update(OTPVerification).values(expires_at=utcnow() - timedelta(seconds=1))
        )
        with pytest.raises(OTPVerificationError):
            await otp_service.verify_otp(db_session, PHONE, "482913")

    async def test_purpose_must_match(self, db_session: AsyncSession):
        await _issue(db_session, "482913", purpose="booking")
        with pytest.raises(OTPVerificationError):
            await otp_service.verify_otp(db_session, PHONE, "482913", purpose="login")

    async def test_deactivated_user_rejected(self, db_session: AsyncSession):
        await make_user(db_session, phone=PHONE, is_active=False)
        await _issue(db_session, "482913")
        with pytest.raises(AuthenticationError):
            await otp_service.verify_otp(db_session, PHONE, "482913")


class TestRefreshTokens:
    async def test_refresh_issues_new_pair(self, db_session: AsyncSession):
        user = await make_user(db_session)
        refresh = create_refresh_token({"sub": str(user.id), "role": user.role})
        tokens = await otp_service.refresh_tokens(db_session, refresh)
        assert decode_token(tokens["access_token"], expected_type="access")["sub"] == str(user.id)

    async def test_access_token_is_not_a_refresh_token(self, db_session: AsyncSession):
        user = await make_user(db_session)
        login_tokens = create_token_pair(str(user.id))
        with pytest.raises(AuthenticationError):
            await otp_service.refresh_tokens(db_session, login_tokens["access_token"])

    async def test_unknown_user(self, db_session: AsyncSession):
        refresh = create_refresh_token({"sub": "6b1f3a5e-0c2d-4f7a-9e8b-1234567890ab"})
        with pytest.raises(AuthenticationError):
            await otp_service.refresh_tokens(db_session, refresh)

    async def test_garbage_token(self, db_session: AsyncSession):
        with pytest.raises(AuthenticationError):
            await otp_service.refresh_tokens(db_session, "not-a-jwt")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class TestAuthEndpoints:
    async def test_request_normalises_phone(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/otp/request", json={"phone": "98765 43210"})
        assert response.status_code == 202
        data = response.json()
        assert data["phone"] == PHONE
        assert data["delivery_status"] == SKIPPED

    async def test_request_rejects_short_phone(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/otp/request", json={"phone": "12345"})
        assert response.status_code == 422

    async def test_verify_and_me(self, client: AsyncClient):
        with patch("casa.services.otp_service.generate_code", return_value="482913"):
            await client.post("/api/v1/auth/otp/request", json={"phone": PHONE})

        response = await client.post("/api/v1/auth/otp/verify", json={"phone": PHONE, "otp": "482913"})
        assert response.status_code == 200
        data = response.json()
        assert data["is_new_user"] is True
        assert data["message"] == "Welcome to Infiniti Casa!"

        headers = {"Authorization": f"Bearer {data['tokens']['access_token']}"}
        me = await client.get("/api/v1/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["phone"] == PHONE

    async def test_verify_wrong_code_is_400(self, client: AsyncClient):
        with patch("casa.services.otp_service.generate_code", return_value="482913"):
            await client.post("/api/v1/auth/otp/request", json={"phone": PHONE})
        response = await client.post("/api/v1/auth/otp/verify", json={"phone": PHONE, "otp": "999999"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired OTP"

    async def test_refresh_endpoint(self, client: AsyncClient, test_user):
        refresh = create_refresh_token({"sub": str(test_user.id)})
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh})
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

    async def test_refresh_with_bad_token_is_401(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "nope"})
        assert response.status_code == 401

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)
