"""Tests for the admin dashboard, booking management, and user management."""

import csv
import io
from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from casa.models.property import Property
from casa.models.user import UserProfile
from casa.schemas.booking import BookingCreate
from casa.services import admin_service, booking_service
from conftest import make_property

pytestmark = pytest.mark.asyncio


async def _book(db: AsyncSession, user: UserProfile, prop: Property, offset: int, nights: int = 2):
    check_in = date.today() + timedelta(days=offset)
    return await booking_service.create_booking(
        db,
        user,
        BookingCreate(
            property_id=prop.id,
            check_in=check_in,
            check_out=check_in + timedelta(days=nights),
            guest_details={"full_name": "Asha Iyer", "email": "asha@test.com", "phone": "+919812345678"},
        ),
    )


class TestOccupancyRate:
    @pytest.mark.parametrize(
        ("active", "properties", "expected"),
        [(0, 0, 0), (3, 0, 0), (0, 6, 0), (1, 6, 17), (2, 6, 33), (3, 6, 50), (1, 8, 13), (6, 6, 100)],
    )
    def test_rounding(self, active, properties, expected):
        assert admin_service.occupancy_rate(active, properties) == expected


class TestDashboard:
    async def test_stats(self, db_session: AsyncSession, test_user: UserProfile, admin_user: UserProfile):
        bandra = await make_property(db_session)
        zen = await make_property(db_session, name="City Zen", category="Urban Zen")

        confirmed = await _book(db_session, test_user, bandra, 10)
        await booking_service.confirm_booking(db_session, confirmed)
        await _book(db_session, test_user, zen, 10)
        cancelled = await _book(db_session, test_user, bandra, 20)
        await booking_service.cancel_booking(db_session, cancelled.id, test_user)

        stats = await admin_service.get_dashboard_stats(db_session)

        assert stats["total_properties"] == 2
        assert stats["total_users"] == 2
        assert stats["total_bookings"] == 3
        assert stats["pending_bookings"] == 1
        assert stats["active_bookings"] == 1
        assert stats["cancelled_bookings"] == 1
        assert stats["total_revenue"] == confirmed.total_amount_paise
        assert stats["monthly_revenue"] == confirmed.total_amount_paise
        assert stats["occupancy_rate"] == 50

    async def test_empty_dashboard(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_properties"] == 0
        assert data["occupancy_rate"] == 0

    async def test_guest_is_forbidden(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/admin/dashboard", headers=auth_headers)
        assert response.status_code == 403


class TestBookingManagement:
    async def test_status_changes(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers: dict,
        test_user: UserProfile,
        test_property: Property,
    ):
        booking = await _book(db_session, test_user, test_property, 10)
        url = f"/api/v1/admin/bookings/{booking.id}/status"

        response = await client.patch(url, json={"status": "confirmed"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = await client.patch(url, json={"status": "completed"}, headers=admin_headers)
        assert response.json()["status"] == "completed"

        response = await client.patch(url, json={"status": "cancelled"}, headers=admin_headers)
        assert response.status_code == 409

    async def test_admin_cancel_reason(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers: dict,
        test_user: UserProfile,
        test_property: Property,
    ):
        booking = await _book(db_session, test_user, test_property, 10)
        response = await client.patch(
            f"/api/v1/admin/bookings/{booking.id}/status", json={"status": "cancelled"}, headers=admin_headers
        )
        assert response.json()["cancellation_reason"] == "cancelled_by_admin"

    async def test_search_and_property_bookings(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers: dict,
        test_user: UserProfile,
        test_property: Property,
    ):
        await _book(db_session, test_user, test_property, 10)
        await _book(db_session, test_user, test_property, 20)

        response = await client.get("/api/v1/admin/bookings", params={"status": "pending"}, headers=admin_headers)
        assert response.json()["total"] == 2

        response = await client.get(f"/api/v1/admin/properties/{test_property.id}/bookings", headers=admin_headers)
        assert len(response.json()) == 2

    async def test_expire_endpoint(self, client: AsyncClient, admin_headers: dict):
        response = await client.post("/api/v1/admin/bookings/expire", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"expired": 0, "booking_ids": []}

    async def test_refund_without_payment_is_409(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers: dict,
        test_user: UserProfile,
        test_property: Property,
    ):
        booking = await _book(db_session, test_user, test_property, 10)
        response = await client.post(f"/api/v1/admin/bookings/{booking.id}/refund", headers=admin_headers)
        assert response.status_code == 409


class TestUserManagement:
    async def test_list_and_deactivate(
        self, client: AsyncClient, admin_headers: dict, test_user: UserProfile, auth_headers: dict
    ):
        response = await client.get("/api/v1/admin/users", params={"role": "guest"}, headers=admin_headers)
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["id"] == str(test_user.id)

        response = await client.patch(
            f"/api/v1/admin/users/{test_user.id}", json={"is_active": False}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        # Existing tokens stop working for a deactivated profile
        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 401

    async def test_properties_include_inactive(self, client: AsyncClient, db_session: AsyncSession, admin_headers: dict):
        await make_property(db_session)
        await make_property(db_session, name="Retired Flat", is_active=False)
        response = await client.get("/api/v1/admin/properties", headers=admin_headers)
        assert response.json()["total"] == 2


class TestExport:
    async def test_bookings_csv(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers: dict,
        test_user: UserProfile,
        test_property: Property,
    ):
        booking = await _book(db_session, test_user, test_property, 10)

        response = await client.get("/api/v1/admin/export/bookings", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="bookings.csv"'
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert len(rows) == 1
        assert rows[0]["confirmation_code"] == booking.confirmation_code
        assert rows[0]["property"] == "The Bandra Cottage"
        assert rows[0]["guest_phone"] == test_user.phone
        assert rows[0]["total_amount_paise"] == str(booking.total_amount_paise)
        assert rows[0]["status"] == "pending"

    async def test_users_csv(self, client: AsyncClient, admin_headers: dict, test_user: UserProfile, admin_user: UserProfile):
        response = await client.get("/api/v1/admin/export/users", headers=admin_headers)
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert {r["phone"] for r in rows} == {test_user.phone, admin_user.phone}
        assert {r["role"] for r in rows} == {"guest", "admin"}

    async def test_properties_csv_includes_inactive(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers: dict
    ):
        await make_property(db_session)
        await make_property(db_session, name="Retired Flat", is_active=False)
        response = await client.get("/api/v1/admin/export/properties", headers=admin_headers)
        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert list(rows[0]) == admin_service.EXPORT_COLUMNS["properties"]
        assert {r["name"] for r in rows} == {"The Bandra Cottage", "Retired Flat"}

    async def test_empty_export_has_header(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/admin/export/properties", headers=admin_headers)
        assert response.text.strip() == ",".join(admin_service.EXPORT_COLUMNS["properties"])

    async def test_unknown_kind_is_422(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/v1/admin/export/payments", headers=admin_headers)
        assert response.status_code == 422

    async def test_guest_is_forbidden(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/admin/export/users", headers=auth_headers)
        assert response.status_code == 403
