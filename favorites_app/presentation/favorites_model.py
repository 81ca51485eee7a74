"""Screen model for the favorites list."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from favorites_app.errors import StorageFault
from favorites_app.schemas.movie import Movie
from favorites_app.services.favorites import FavoritesStore

from .base import ScreenModel


@dataclass(frozen=True)
class FavoritesUiState:
    favorites: list[Movie] = field(default_factory=list)
    is_loading: bool = True
    error: str | None = None


class FavoritesScreenModel(ScreenModel[FavoritesUiState]):
    def __init__(self, store: FavoritesStore) -> None:
        super().__init__(FavoritesUiState())
        self._store = store

    def start(self) -> asyncio.Task[None]:
        return self.launch(self._collect())

    async def remove(self, movie_id: str) -> None:
        try:
            await self._store.remove(movie_id)
        except StorageFault as exc:
            self._set_state(error=str(exc))

    async def _collect(self) -> None:
        try:
            async with self._store.all() as favorites:
                async for movies in favorites:
                    self._set_state(favorites=movies, is_loading=False)
        except StorageFault as exc:
            self._set_state(error=str(exc), is_loading=False)
