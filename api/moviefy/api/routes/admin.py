"""Admin endpoints guarded by the shared admin key."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.api.deps import get_db, require_admin
from moviefy.models.feedback import FeedbackStatus
from moviefy.models.media import MediaType
from moviefy.schema.catalog import SiteSettingsRead, SiteSettingsUpdate
from moviefy.schema.feedback import FeedbackRead, FeedbackStatusUpdate
from moviefy.schema.post import AdCreate, AdRead, PostCreate, PostRead
from moviefy.services import ad_service, feedback_service, post_service, settings_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/posts", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, session: AsyncSession = Depends(get_db)) -> PostRead:
    post = await post_service.create_post(session, payload)
    return PostRead.model_validate(post)


@router.get("/posts", response_model=list[PostRead])
async def list_posts(
    media_type: MediaType | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=200),
    session: AsyncSession = Depends(get_db),
) -> list[PostRead]:
    """List curated posts newest first; ``limit`` returns only the latest N."""
    if limit is not None and media_type is None:
        posts = await post_service.latest_posts(session, limit)
    else:
        posts = await post_service.list_posts(session, media_type)
        if limit is not None:
            posts = posts[:limit]
    return [PostRead.model_validate(post) for post in posts]


@router.delete(
    "/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    response_model=None,
)
async def delete_post(post_id: str, session: AsyncSession = Depends(get_db)) -> None:
    try:
        await post_service.delete_post(session, post_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/settings", response_model=SiteSettingsRead)
async def read_settings(session: AsyncSession = Depends(get_db)) -> SiteSettingsRead:
    return await settings_service.get_site_settings(session)


@router.put("/settings", response_model=SiteSettingsRead)
async def update_settings(payload: SiteSettingsUpdate, session: AsyncSession = Depends(get_db)) -> SiteSettingsRead:
    return await settings_service.update_site_settings(session, payload)


@router.post("/ads", response_model=AdRead, status_code=status.HTTP_201_CREATED)
async def create_ad(payload: AdCreate, session: AsyncSession = Depends(get_db)) -> AdRead:
    ad = await ad_service.create_ad(session, payload)
    return AdRead.model_validate(ad)


@router.delete(
    "/ads/{ad_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    response_model=None,
)
async def delete_ad(ad_id: str, session: AsyncSession = Depends(get_db)) -> None:
    try:
        await ad_service.delete_ad(session, ad_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/feedback", response_model=list[FeedbackRead])
async def list_feedback(
    status_filter: FeedbackStatus | None = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_db),
) -> list[FeedbackRead]:
    entries = await feedback_service.list_feedback(session, status_filter)
    return [FeedbackRead.model_validate(entry) for entry in entries]


@router.patch("/feedback/{feedback_id}", response_model=FeedbackRead)
async def update_feedback_status(
    feedback_id: str,
    payload: FeedbackStatusUpdate,
    session: AsyncSession = Depends(get_db),
) -> FeedbackRead:
    try:
        feedback = await feedback_service.update_feedback_status(session, feedback_id, payload.status)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FeedbackRead.model_validate(feedback)
