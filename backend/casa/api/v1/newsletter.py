"""Newsletter sign-up (public)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from casa.api.deps import get_db
from casa.schemas.user import (
    NewsletterResponse,
    NewsletterSubscribeRequest,
    NewsletterUnsubscribeRequest,
)
from casa.services import user_service

router = APIRouter(prefix="/api/v1/newsletter", tags=["newsletter"])


@router.post("/subscribe", response_model=NewsletterResponse, status_code=status.HTTP_201_CREATED)
async def subscribe(body: NewsletterSubscribeRequest, db: AsyncSession = Depends(get_db)) -> NewsletterResponse:
    subscription = await user_service.subscribe_newsletter(db, body.email, body.full_name, body.source)
    return NewsletterResponse.model_validate(subscription)


@router.post("/unsubscribe", response_model=NewsletterResponse)
async def unsubscribe(body: NewsletterUnsubscribeRequest, db: AsyncSession = Depends(get_db)) -> NewsletterResponse:
    subscription = await user_service.unsubscribe_newsletter(db, body.email)
    return NewsletterResponse.model_validate(subscription)
