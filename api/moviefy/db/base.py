"""Import all models here so metadata.create_all sees every table."""

from moviefy.db.base_class import Base
from moviefy.models import ad, feedback, post, site_settings  # noqa: F401

__all__ = ["Base"]
