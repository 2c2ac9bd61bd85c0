"""Browse and search endpoints over the merged catalog."""

from fastapi import APIRouter, Depends, Query

from moviefy.api.deps import get_aggregator
from moviefy.core.config import settings
from moviefy.pipeline.aggregator import CatalogAggregator
from moviefy.schema.catalog import HomeSections, Page, SortOption

MAX_PAGE_SIZE = 50

router = APIRouter()


@router.get("/movies", response_model=Page)
async def list_movies(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.page_size_listings, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortOption = Query(default=SortOption.UPDATED_ON_DESC),
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> Page:
    return await aggregator.list_movies(page=page, page_size=page_size, sort=sort_by)


@router.get("/tv", response_model=Page)
async def list_tv_shows(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.page_size_listings, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortOption = Query(default=SortOption.UPDATED_ON_DESC),
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> Page:
    return await aggregator.list_tv_shows(page=page, page_size=page_size, sort=sort_by)


@router.get("/search", response_model=Page)
async def search(
    query: str = Query(default=""),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.page_size_search, ge=1, le=MAX_PAGE_SIZE),
    aggregator: CatalogAggregator = Depends(get_aggregator),
) -> Page:
    """Search curated and external titles; a blank query returns an empty page."""
    return await aggregator.search(query, page=page, page_size=page_size)


@router.get("/home", response_model=HomeSections)
async def home(aggregator: CatalogAggregator = Depends(get_aggregator)) -> HomeSections:
    return await aggregator.home_sections()
