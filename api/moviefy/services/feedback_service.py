"""Visitor feedback inbox."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.models.feedback import Feedback, FeedbackStatus
from moviefy.schema.feedback import FeedbackCreate

logger = logging.getLogger("moviefy.services.feedback")


async def submit_feedback(session: AsyncSession, payload: FeedbackCreate) -> Feedback:
    feedback = Feedback(
        type=payload.type,
        message=payload.message,
        email=str(payload.email) if payload.email else None,
        status=FeedbackStatus.PENDING,
    )
    session.add(feedback)
    await session.commit()
    await session.refresh(feedback)
    logger.info("Feedback received", extra={"feedback_id": feedback.id, "type": feedback.type.value})
    return feedback


async def list_feedback(session: AsyncSession, status: FeedbackStatus | None = None) -> list[Feedback]:
    """Newest submissions first, optionally only those with ``status``."""
    stmt = select(Feedback).order_by(Feedback.created_at.desc(), Feedback.id)
    if status is not None:
        stmt = stmt.where(Feedback.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_feedback_status(session: AsyncSession, feedback_id: str, status: FeedbackStatus) -> Feedback:
    feedback = await session.get(Feedback, feedback_id)
    if not feedback:
        raise ValueError("Feedback not found")
    feedback.status = status
    feedback.updated_at = datetime.now(timezone.utc)
    await session.commit()
    await session.refresh(feedback)
    return feedback
