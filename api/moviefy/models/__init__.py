from moviefy.models.ad import Ad, AdExpiryUnit
from moviefy.models.feedback import Feedback, FeedbackStatus, FeedbackType
from moviefy.models.media import LinkKind, MediaType, SourceKind
from moviefy.models.post import Post
from moviefy.models.site_settings import GLOBAL_SETTINGS_ID, SiteSettings

__all__ = [
    "Ad",
    "AdExpiryUnit",
    "Feedback",
    "FeedbackStatus",
    "FeedbackType",
    "GLOBAL_SETTINGS_ID",
    "LinkKind",
    "MediaType",
    "Post",
    "SiteSettings",
    "SourceKind",
]
"""SQLAlchemy ORM models for the Moviefy catalog."""
