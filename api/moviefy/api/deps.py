import hmac

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviefy.core.config import settings
from moviefy.db.session import get_session
from moviefy.pipeline.aggregator import CatalogAggregator
from moviefy.pipeline.detail import DetailAssembler
from moviefy.pipeline.link_resolver import LinkResolver
from moviefy.services import settings_service
from moviefy.services.post_service import PostStore
from moviefy.sources.metadata import MetadataAPIClient


async def get_db() -> AsyncSession:
    async for session in get_session():
        yield session


def get_metadata_client() -> MetadataAPIClient:
    return MetadataAPIClient()


def is_admin_key(candidate: str | None) -> bool:
    expected = settings.admin_access_key
    if not expected or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


async def require_admin(x_admin_key: str | None = Header(default=None, alias="X-Admin-Key")) -> None:
    if not is_admin_key(x_admin_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin key")


async def get_aggregator(
    session: AsyncSession = Depends(get_db),
    metadata: MetadataAPIClient = Depends(get_metadata_client),
) -> CatalogAggregator:
    return CatalogAggregator(store=PostStore(session), external=metadata)


async def get_detail_assembler(
    session: AsyncSession = Depends(get_db),
    metadata: MetadataAPIClient = Depends(get_metadata_client),
) -> DetailAssembler:
    """Build an assembler with the shortener settings read once for this request."""
    shortener = await settings_service.get_shortener_config(session)
    return DetailAssembler(PostStore(session), metadata, LinkResolver(shortener))
