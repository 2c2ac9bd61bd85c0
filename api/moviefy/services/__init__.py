from . import ad_service, feedback_service, post_service, settings_service

__all__ = [
    "ad_service",
    "feedback_service",
    "post_service",
    "settings_service",
]
"""Service-layer helpers for API operations."""
