"""Collaborator interfaces consumed by the aggregation pipeline."""

from __future__ import annotations

from typing import Any, Protocol

from moviefy.models.media import MediaType

Document = dict[str, Any]


class CuratedStore(Protocol):
    """Document access to admin-curated posts.

    Implementations raise ``SourceUnavailableError`` when the store cannot
    be read; a missing document is ``None``, not an error.
    """

    async def get_by_id(self, post_id: str) -> Document | None: ...

    async def query_by_type(self, media_type: MediaType) -> list[Document]: ...

    async def query_all(self) -> list[Document]: ...

    async def latest(self, limit: int) -> list[Document]: ...

class ExternalCatalog(Protocol):
    """The metadata API's fixed REST surface."""

    async def list_movies(self, *, sort_by: str, page: int, page_size: int) -> Document: ...

    async def list_tv_shows(self, *, sort_by: str, page: int, page_size: int) -> Document: ...

    async def search(self, query: str, *, page: int, page_size: int) -> Document: ...

    async def get_by_id(self, title_id: str) -> Document | None: ...
