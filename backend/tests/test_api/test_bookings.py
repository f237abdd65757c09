"""Tests for booking endpoints."""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from casa.models.property import Property
from conftest import booking_payload, headers_for, make_user

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _future_dates(offset_start: int = 30, nights: int = 3) -> tuple[date, date]:
    """Return a (check_in, check_out) pair safely in the future."""
    check_in = date.today() + timedelta(days=offset_start)
    return check_in, check_in + timedelta(days=nights)


# ---------------------------------------------------------------------------
# POST /api/v1/bookings/quote
# ---------------------------------------------------------------------------


class TestQuote:
    async def test_quote_is_public(self, client: AsyncClient, test_property: Property):
        ci, co = _future_dates(30, 3)
        response = await client.post(
            "/api/v1/bookings/quote",
            json={
                "property_id": str(test_property.id),
                "check_in": ci.isoformat(),
                "check_out": co.isoformat(),
                "guests": 2,
                "pets": 1,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["nights"] == 3
        assert data["subtotal"] == 1_860_000
        assert data["service_fee"] == 223_200
        assert data["pet_fee"] == 50_000
        assert data["total"] == 2_133_200
        assert data["currency"] == "INR"

    async def test_quote_rejects_reversed_dates(self, client: AsyncClient, test_property: Property):
        ci, co = _future_dates(30, 3)
        response = await client.post(
            "/api/v1/bookings/quote",
            json={"property_id": str(test_property.id), "check_in": co.isoformat(), "check_out": ci.isoformat()},
        )
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    async def test_create_success(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 3)
        response = await client.post(
            "/api/v1/bookings",
            json=booking_payload(test_property.id, ci, co, special_requests="Late check-in around 10pm"),
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["payment_status"] == "pending"
        assert data["total_amount_paise"] == 2_083_200
        assert data["confirmation_code"].startswith("IC")
        assert data["special_requests"] == "Late check-in around 10pm"
        assert data["property"]["name"] == "The Bandra Cottage"

    async def test_client_cannot_set_price(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 1)
        response = await client.post(
            "/api/v1/bookings",
            json=booking_payload(test_property.id, ci, co, total_amount_paise=1),
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["total_amount_paise"] == 694_400

    async def test_overlap_is_409(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 3)
        first = await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        assert first.status_code == 201

        overlapping = await client.post(
            "/api/v1/bookings",
            json=booking_payload(test_property.id, ci + timedelta(days=1), co + timedelta(days=1)),
            headers=auth_headers,
        )
        assert overlapping.status_code == 409

        back_to_back = await client.post(
            "/api/v1/bookings",
            json=booking_payload(test_property.id, co, co + timedelta(days=2)),
            headers=auth_headers,
        )
        assert back_to_back.status_code == 201

    async def test_too_many_guests_is_400(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 2)
        response = await client.post(
            "/api/v1/bookings",
            json=booking_payload(test_property.id, ci, co, guests=9),
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_past_check_in_is_400(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(-10, 3)
        response = await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        assert response.status_code == 400

    async def test_missing_property_is_404(self, client: AsyncClient, auth_headers: dict):
        ci, co = _future_dates(30, 2)
        response = await client.post("/api/v1/bookings", json=booking_payload(uuid.uuid4(), ci, co), headers=auth_headers)
        assert response.status_code == 404

    async def test_invalid_guest_email_is_422(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 2)
        payload = booking_payload(test_property.id, ci, co)
        payload["guest_details"]["email"] = "not-an-email"
        response = await client.post("/api/v1/bookings", json=payload, headers=auth_headers)
        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient, test_property: Property):
        ci, co = _future_dates(30, 2)
        response = await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co))
        assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# Reading and cancelling
# ---------------------------------------------------------------------------


class TestMyBookings:
    async def test_list_get_and_stats(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 3)
        created = (
            await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        ).json()

        listing = await client.get("/api/v1/bookings", headers=auth_headers)
        assert listing.json()["total"] == 1

        detail = await client.get(f"/api/v1/bookings/{created['id']}", headers=auth_headers)
        assert detail.status_code == 200
        assert detail.json()["confirmation_code"] == created["confirmation_code"]

        upcoming = await client.get("/api/v1/bookings/upcoming", headers=auth_headers)
        assert [b["id"] for b in upcoming.json()] == [created["id"]]

        past = await client.get("/api/v1/bookings/past", headers=auth_headers)
        assert past.json() == []

        stats = await client.get("/api/v1/bookings/stats", headers=auth_headers)
        assert stats.json()["pending"] == 1
        assert stats.json()["revenue"] == 0

    async def test_other_users_booking_is_404(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers: dict, test_property: Property
    ):
        ci, co = _future_dates(30, 3)
        created = (
            await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        ).json()

        stranger = headers_for(await make_user(db_session))
        response = await client.get(f"/api/v1/bookings/{created['id']}", headers=stranger)
        assert response.status_code == 404

    async def test_cancel_twice(self, client: AsyncClient, auth_headers: dict, test_property: Property):
        ci, co = _future_dates(30, 3)
        created = (
            await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        ).json()

        first = await client.post(
            f"/api/v1/bookings/{created['id']}/cancel", json={"reason": "plans changed"}, headers=auth_headers
        )
        assert first.status_code == 200
        assert first.json()["status"] == "cancelled"
        assert first.json()["cancellation_reason"] == "plans changed"

        second = await client.post(f"/api/v1/bookings/{created['id']}/cancel", headers=auth_headers)
        assert second.status_code == 200
        assert second.json()["cancellation_reason"] == "plans changed"

        # Dates are free again
        rebook = await client.post("/api/v1/bookings", json=booking_payload(test_property.id, ci, co), headers=auth_headers)
        assert rebook.status_code == 201
