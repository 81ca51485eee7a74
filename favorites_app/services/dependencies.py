"""Application container and FastAPI dependency wiring.

The container is the one place that constructs the process-wide persistence
handle, the favorites store, and the catalog client.  It is created once at
startup (API lifespan or CLI command), handed to dependents explicitly, and
closed at shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from favorites_app.errors import StorageFault
from favorites_app.presentation import (
    DetailsScreenModel,
    FavoritesScreenModel,
    ListScreenModel,
)
from favorites_app.schemas.movie import Movie
from favorites_app.services.favorites import FavoritesStore, build_persistence
from favorites_app.services.movie_repository import MovieRepository
from favorites_app.services.tmdb_client import TmdbClient
from favorites_app.settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    settings: AppSettings
    store: FavoritesStore
    tmdb_client: TmdbClient
    movies: MovieRepository

    def list_screen_model(self) -> ListScreenModel:
        return ListScreenModel(self.movies)

    def favorites_screen_model(self) -> FavoritesScreenModel:
        return FavoritesScreenModel(self.store)

    def details_screen_model(self, movie: Movie) -> DetailsScreenModel:
        return DetailsScreenModel(movie, self.store)

    async def aclose(self) -> None:
        await self.tmdb_client.aclose()
        await self.store.close()
        logger.debug("Application container closed")


async def create_container(
    settings: AppSettings,
    *,
    tmdb_client: TmdbClient | None = None,
) -> AppContainer:
    """Build and open every long-lived dependency described by ``settings``."""

    store = FavoritesStore(build_persistence(settings))
    try:
        await store.open()
    except StorageFault:
        await store.close()
        raise

    client = tmdb_client or TmdbClient(
        api_key=settings.tmdb_api_key,
        base_url=settings.tmdb_base_url,
        timeout=settings.http_timeout_seconds,
    )
    movies = MovieRepository(client, poster_base_url=settings.poster_base_url)
    return AppContainer(
        settings=settings,
        store=store,
        tmdb_client=client,
        movies=movies,
    )


def get_container(request: Request) -> AppContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Application container is not initialised")
    return container


def get_favorites_store(request: Request) -> FavoritesStore:
    return get_container(request).store


def get_movie_repository(request: Request) -> MovieRepository:
    return get_container(request).movies


__all__ = [
    "AppContainer",
    "create_container",
    "get_container",
    "get_favorites_store",
    "get_movie_repository",
]
