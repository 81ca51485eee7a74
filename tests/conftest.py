"""Shared pytest fixtures for the movie favorites project.

The ``pytest`` plugin system automatically imports ``tests.conftest``. We use
that behavior to ensure the repository root is present on ``sys.path`` before
any test modules import application code, and to expose the movie, store, and
catalog doubles that most suites share.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from favorites_app.db.connection import create_engine
from favorites_app.schemas.movie import Movie
from favorites_app.services.favorites import (
    FavoritesStore,
    InMemoryFavoritesPersistence,
    SqlFavoritesPersistence,
)
from favorites_app.services.tmdb_client import TmdbClient
from tests import _ensure_repo_on_path
from tests.support import popular_payload, remote_movie, sqlite_url

_ENV_KEYS = (
    "DATABASE_URL",
    "STORE_BACKEND",
    "TMDB_API_KEY",
    "TMDB_BASE_URL",
    "TMDB_POSTER_BASE_URL",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "CORS_ALLOW_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove application variables inherited from the developer shell."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def make_movie() -> Callable[..., Movie]:
    """Factory producing fully populated movies keyed by ``movie_id``."""

    def _make(movie_id: str = "42", **overrides: Any) -> Movie:
        fields: dict[str, Any] = {
            "id": movie_id,
            "title": f"Movie {movie_id}",
            "genre": "Movie",
            "year": "1999",
            "duration": "N/A",
            "rating": 7.5,
            "poster_url": f"https://image.tmdb.org/t/p/w500/{movie_id}.jpg",
            "synopsis": f"Synopsis for {movie_id}",
        }
        fields.update(overrides)
        return Movie(**fields)

    return _make


@pytest_asyncio.fixture
async def sql_persistence(tmp_path: Path) -> AsyncIterator[SqlFavoritesPersistence]:
    """File-backed SQLite persistence so concurrent sessions use real connections."""

    persistence = SqlFavoritesPersistence(
        create_engine(sqlite_url(tmp_path / "favorites.db"))
    )
    await persistence.open()
    yield persistence
    await persistence.close()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncIterator[FavoritesStore]:
    """Opened favorites store, once per storage backend."""

    if request.param == "sql":
        persistence = SqlFavoritesPersistence(
            create_engine(sqlite_url(tmp_path / "favorites.db"))
        )
    else:
        persistence = InMemoryFavoritesPersistence()

    favorites_store = FavoritesStore(persistence)
    await favorites_store.open()
    yield favorites_store
    await favorites_store.close()


@pytest.fixture
def catalog_pages() -> dict[int, dict[str, Any]]:
    """Popular pages served by :func:`tmdb_client`; tests may edit them."""

    return {
        1: popular_payload(remote_movie(42), remote_movie(7), page=1, total_pages=2),
        2: popular_payload(remote_movie(99), page=2, total_pages=2),
    }


@pytest_asyncio.fixture
async def tmdb_client(
    catalog_pages: dict[int, dict[str, Any]],
) -> AsyncIterator[TmdbClient]:
    """TMDB client answering from ``catalog_pages`` through a mock transport."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        payload = catalog_pages.get(page)
        if payload is None:
            return httpx.Response(404, json={"status_message": "not found"})
        return httpx.Response(200, json=payload)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = TmdbClient(
        api_key="test-key",
        base_url="https://tmdb.test/3",
        client=http_client,
    )
    yield client
    await http_client.aclose()


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()
