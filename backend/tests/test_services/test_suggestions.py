"""Tests for the property suggestion questionnaire."""

from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from casa.exceptions import NotFoundError
from casa.models.property import Property
from casa.schemas.admin import SuggestionRequest
from casa.services.suggestion_service import score_property, suggest_property
from conftest import make_property

pytestmark = pytest.mark.asyncio

COLLECTION = [
    {"name": "The Bandra Cottage", "guests": 4, "category": "Heritage", "aesthetic": "colonial grandeur", "price_per_night_paise": 620_000},
    {"name": "Little White Studio", "guests": 2, "category": "Studio", "aesthetic": "scandinavian white", "price_per_night_paise": 420_000},
    {"name": "City Zen", "guests": 2, "category": "Urban Zen", "aesthetic": "japanese zen minimalism", "price_per_night_paise": 550_000},
    {"name": "India House", "guests": 6, "category": "Heritage", "aesthetic": "heritage grandeur", "price_per_night_paise": 980_000},
    {"name": "Sky Lounge", "guests": 8, "category": "Penthouse", "aesthetic": "modern luxury", "price_per_night_paise": 1_850_000},
]


def _answers(**overrides) -> SuggestionRequest:
    data = {"group_size": 2, "purpose": "romantic", "aesthetic": "minimalist", "budget_paise": 500_000}
    data.update(overrides)
    return SuggestionRequest(**data)


class TestScoreProperty:
    def test_full_breakdown(self):
        studio = Property(**COLLECTION[1])
        # fits (3) + snug fit (2) + romantic studio (5) + minimalist (5) + within budget (3)
        assert score_property(studio, _answers()) == 18

    def test_well_within_budget_bonus(self):
        studio = Property(**COLLECTION[1])
        assert score_property(studio, _answers(budget_paise=525_000)) == 20
        assert score_property(studio, _answers(budget_paise=524_999)) == 18

    def test_group_too_large_gets_no_size_points(self):
        studio = Property(**COLLECTION[1])
        assert score_property(studio, _answers(group_size=3, budget_paise=0)) == 10

    def test_aesthetic_keywords_are_case_insensitive(self):
        prop = Property(**{**COLLECTION[4], "aesthetic": "Modern LUXURY"})
        low = score_property(prop, _answers(group_size=20, purpose="cultural", aesthetic="modern", budget_paise=0))
        assert low == 4


class TestSuggestProperty:
    async def test_romantic_pair_gets_the_studio(self, db_session: AsyncSession):
        for data in COLLECTION:
            await make_property(db_session, **data)

        prop, score = await suggest_property(db_session, _answers())
        assert prop.name == "Little White Studio"
        assert score == 18

    async def test_celebration_gets_the_penthouse(self, db_session: AsyncSession):
        for data in COLLECTION:
            await make_property(db_session, **data)

        prop, score = await suggest_property(
            db_session,
            _answers(group_size=6, purpose="celebration", aesthetic="modern", budget_paise=2_000_000),
        )
        assert prop.name == "Sky Lounge"
        assert score == 17

    async def test_tie_goes_to_oldest_property(self, db_session: AsyncSession):
        await make_property(db_session, **{**COLLECTION[1], "name": "A Newer Studio", "created_at": datetime(2025, 1, 1)})
        await make_property(db_session, **{**COLLECTION[1], "name": "Z Older Studio", "created_at": datetime(2024, 1, 1)})

        prop, _score = await suggest_property(db_session, _answers())
        assert prop.name == "Z Older Studio"

    async def test_inactive_properties_are_skipped(self, db_session: AsyncSession):
        await make_property(db_session, **{**COLLECTION[1], "is_active": False})
        await make_property(db_session, **COLLECTION[0])
        prop, _score = await suggest_property(db_session, _answers())
        assert prop.name == "The Bandra Cottage"

    async def test_no_properties(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await suggest_property(db_session, _answers())


class TestSuggestionEndpoints:
    async def test_suggest_and_admin_history(self, client: AsyncClient, db_session: AsyncSession, admin_headers: dict):
        for data in COLLECTION:
            await make_property(db_session, **data)

        response = await client.post(
            "/api/v1/suggestions",
            json={"group_size": 2, "purpose": "romantic", "aesthetic": "minimalist", "budget_paise": 500_000},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Little White Studio"
        assert response.json()["score"] == 18

        history = await client.get("/api/v1/admin/suggestions", headers=admin_headers)
        assert history.status_code == 200
        assert history.json()[0]["property_name"] == "Little White Studio"
        assert history.json()[0]["user_preferences"]["purpose"] == "romantic"

    async def test_unknown_purpose_is_422(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/suggestions",
            json={"group_size": 2, "purpose": "skiing", "aesthetic": "modern", "budget_paise": 1},
        )
        assert response.status_code == 422
