"""Screen model for a single movie's details page."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from favorites_app.errors import StorageFault
from favorites_app.schemas.movie import Movie
from favorites_app.services.favorites import FavoritesStore

from .base import ScreenModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailsUiState:
    movie: Movie
    is_favorite: bool = False
    error: str | None = None


class DetailsScreenModel(ScreenModel[DetailsUiState]):
    """Mirror the movie's favorite status and toggle it on request."""

    def __init__(self, movie: Movie, store: FavoritesStore) -> None:
        super().__init__(DetailsUiState(movie=movie))
        self._store = store

    def start(self) -> asyncio.Task[None]:
        return self.launch(self._collect())

    async def toggle_favorite(self) -> None:
        movie = self.state.movie
        try:
            if self.state.is_favorite:
                await self._store.remove(movie.id)
            else:
                await self._store.add(movie)
        except StorageFault as exc:
            logger.error("Could not update favorite %s: %s", movie.id, exc)
            self._set_state(error=str(exc))

    async def _collect(self) -> None:
        try:
            async with self._store.is_favorite(self.state.movie.id) as membership:
                async for is_favorite in membership:
                    self._set_state(is_favorite=is_favorite, error=None)
        except StorageFault as exc:
            self._set_state(error=str(exc))
