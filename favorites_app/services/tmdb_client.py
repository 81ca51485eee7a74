"""Async HTTP client for TMDB's popular-movies catalog."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from favorites_app.errors import UpstreamFault
from favorites_app.schemas.tmdb import PopularMoviesResponse
from favorites_app.settings import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TMDB_BASE_URL

logger = logging.getLogger(__name__)


class TmdbClient:
    """Thin wrapper around :class:`httpx.AsyncClient` for the catalog endpoints.

    Every failure (transport error, non-2xx status, undecodable body) is
    raised as :class:`UpstreamFault`; nothing is retried.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_TMDB_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_popular(self, page: int = 1) -> PopularMoviesResponse:
        if page < 1:
            raise ValueError("page must be >= 1")

        url = f"{self._base_url}/movie/popular"
        params: dict[str, str | int] = {"page": page}
        if self._api_key:
            params["api_key"] = self._api_key

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning("TMDB popular page %s returned HTTP %s", page, status_code)
            raise UpstreamFault(
                f"Movie catalog responded with HTTP {status_code}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("TMDB popular page %s request failed: %s", page, exc)
            raise UpstreamFault(f"Movie catalog unreachable: {exc}") from exc
        except ValueError as exc:
            raise UpstreamFault("Movie catalog returned invalid JSON") from exc

        try:
            return PopularMoviesResponse.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamFault(
                f"Movie catalog returned an unexpected payload: {exc.error_count()} error(s)"
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
