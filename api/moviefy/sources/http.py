from __future__ import annotations

from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter


class SourceUnavailableError(Exception):
    """An upstream source could not produce a usable response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamServerError(SourceUnavailableError):
    pass


async def fetch_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 15.0,
    attempts: int = 3,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """GET a JSON object, retrying transport failures and 5xx responses."""
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential_jitter(initial=1, max=8),
            retry=retry_if_exception_type((httpx.TransportError, UpstreamServerError)),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                    response = await client.get(url, params=params, headers=headers)
                if response.status_code >= 500:
                    raise UpstreamServerError(
                        f"Server error {response.status_code}", status_code=response.status_code
                    )
                if response.status_code >= 400:
                    raise SourceUnavailableError(
                        f"Client error {response.status_code}", status_code=response.status_code
                    )
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise SourceUnavailableError("Response body is not valid JSON") from exc
                if not isinstance(payload, dict):
                    raise SourceUnavailableError("Response body is not a JSON object")
                return payload
    except httpx.HTTPError as exc:
        raise SourceUnavailableError(f"{type(exc).__name__}: {exc}") from exc
    raise SourceUnavailableError("Unreachable")
