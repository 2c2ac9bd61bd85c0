"""Public site configuration, banner and feedback endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.api.deps import get_db
from moviefy.schema.catalog import SiteSettingsPublic
from moviefy.schema.feedback import FeedbackCreate, FeedbackReceipt
from moviefy.schema.post import AdRead
from moviefy.services import ad_service, feedback_service, settings_service

router = APIRouter()


@router.get("/site", response_model=SiteSettingsPublic)
async def read_site_settings(session: AsyncSession = Depends(get_db)) -> SiteSettingsPublic:
    return await settings_service.get_public_settings(session)


@router.get("/ads/active", response_model=list[AdRead])
async def list_active_ads(session: AsyncSession = Depends(get_db)) -> list[AdRead]:
    ads = await ad_service.list_active_ads(session)
    return [AdRead.model_validate(ad) for ad in ads]


@router.post("/feedback", response_model=FeedbackReceipt, status_code=status.HTTP_201_CREATED)
async def submit_feedback(payload: FeedbackCreate, session: AsyncSession = Depends(get_db)) -> FeedbackReceipt:
    feedback = await feedback_service.submit_feedback(session, payload)
    return FeedbackReceipt(id=feedback.id, status=feedback.status)
