"""Feedback form payloads and admin views."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from moviefy.models.feedback import FeedbackStatus, FeedbackType
from moviefy.schema.base import ORMModel


class FeedbackCreate(BaseModel):
    type: FeedbackType
    message: str = Field(min_length=10, max_length=2000)
    email: EmailStr | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class FeedbackReceipt(BaseModel):
    id: str
    status: FeedbackStatus


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus


class FeedbackRead(ORMModel):
    id: str
    type: FeedbackType
    message: str
    email: str | None = None
    status: FeedbackStatus
    created_at: datetime
    updated_at: datetime
