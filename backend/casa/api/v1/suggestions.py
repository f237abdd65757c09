"""Property suggestion helper (public)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_db
from casa.schemas.admin import SuggestionRequest, SuggestionResponse
from casa.services import suggestion_service

router = APIRouter(prefix="/api/v1/suggestions", tags=["suggestions"])


@router.post("", response_model=SuggestionResponse)
async def suggest(body: SuggestionRequest, db: AsyncSession = Depends(get_db)) -> SuggestionResponse:
    """Pick the property that best fits the questionnaire answers."""
    prop, score = await suggestion_service.suggest_property(db, body)
    return SuggestionResponse(
        property_id=prop.id,
        name=prop.name,
        category=prop.category,
        aesthetic=prop.aesthetic,
        guests=prop.guests,
        price_per_night_paise=prop.price_per_night_paise,
        score=score,
    )
