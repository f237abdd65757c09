"""Suggestion service — match a guest's answers to the best-fitting property."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casa.exceptions import NotFoundError
from casa.models.engagement import PropertySuggestion
from casa.models.property import Property
from casa.schemas.admin import SuggestionRequest

logger = logging.getLogger(__name__)

# purpose -> {category: points}
PURPOSE_POINTS: dict[str, dict[str, int]] = {
    "romantic": {"Studio": 5, "Heritage": 3},
    "business": {"Urban Zen": 5, "Penthouse": 4},
    "celebration": {"Penthouse": 5, "Heritage": 4},
    "cultural": {"Art & Culture": 5, "Heritage": 4},
    "relaxation": {"Urban Zen": 5, "Studio": 4},
}

# aesthetic answer -> [(keywords found in the property's aesthetic, points)]
AESTHETIC_POINTS: dict[str, list[tuple[tuple[str, ...], int]]] = {
    "modern": [(("luxury", "zen"), 4), (("contemporary",), 3)],
    "traditional": [(("heritage", "grandeur"), 5)],
    "artistic": [(("art", "scandinavian"), 5)],
    "minimalist": [(("zen", "scandinavian"), 5)],
}


def score_property(prop: Property, answers: SuggestionRequest) -> int:
    score = 0

    if answers.group_size <= prop.guests:
        score += 3
        if prop.guests - answers.group_size <= 2:
            score += 2

    score += PURPOSE_POINTS.get(answers.purpose, {}).get(prop.category, 0)

    aesthetic = (prop.aesthetic or "").lower()
    for keywords, points in AESTHETIC_POINTS.get(answers.aesthetic, []):
        if any(word in aesthetic for word in keywords):
            score += points

    if prop.price_per_night_paise <= answers.budget_paise:
        score += 3
        # well within budget: at most 80 %
        if prop.price_per_night_paise * 10 <= answers.budget_paise * 8:
            score += 2

    return score


async def suggest_property(db: AsyncSession, answers: SuggestionRequest) -> tuple[Property, int]:
    """Score every active property and record the winner.

    Ties go to the property listed first (oldest).

    Raises:
        NotFoundError: There are no active properties.
    """
    result = await db.execute(
        select(Property).where(Property.is_active.is_(True)).order_by(Property.created_at.asc(), Property.name.asc())
    )
    properties = list(result.scalars().all())
    if not properties:
        raise NotFoundError("No properties available")

    best, best_score = properties[0], score_property(properties[0], answers)
    for prop in properties[1:]:
        score = score_property(prop, answers)
        if score > best_score:
            best, best_score = prop, score

    suggestion = PropertySuggestion(
        suggested_property_id=best.id,
        user_preferences=answers.model_dump(mode="json"),
    )
    db.add(suggestion)
    await db.flush()
    await db.refresh(suggestion)
    logger.info("Suggested property %s (score %d) for %s", best.id, best_score, answers.purpose)
    return best, best_score


async def list_suggestions(db: AsyncSession, limit: int = 100) -> list[PropertySuggestion]:
    result = await db.execute(
        select(PropertySuggestion).order_by(PropertySuggestion.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
