"""Screen model for the popular-movies grid."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from favorites_app.errors import UpstreamFault
from favorites_app.schemas.movie import Movie
from favorites_app.services.movie_repository import MovieRepository

from .base import ScreenModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListUiState:
    movies: list[Movie] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None
    page: int = 0
    total_pages: int = 0

    @property
    def can_load_more(self) -> bool:
        return self.page < self.total_pages


class ListScreenModel(ScreenModel[ListUiState]):
    """Load the catalog page by page; failures become a displayable message."""

    def __init__(self, repository: MovieRepository) -> None:
        super().__init__(ListUiState())
        self._repository = repository

    def start(self) -> asyncio.Task[None]:
        return self.launch(self.load())

    async def load(self) -> None:
        await self._fetch(1, append=False)

    async def load_more(self) -> None:
        if self.state.is_loading or not self.state.can_load_more:
            return
        await self._fetch(self.state.page + 1, append=True)

    async def _fetch(self, page: int, *, append: bool) -> None:
        self._set_state(is_loading=True)
        try:
            result = await self._repository.get_popular_page(page)
        except UpstreamFault as exc:
            logger.warning("Error loading movies: %s", exc)
            self._set_state(error=str(exc), is_loading=False)
            return

        movies = [*self.state.movies, *result.results] if append else result.results
        self._set_state(
            movies=movies,
            is_loading=False,
            error=None,
            page=result.page,
            total_pages=result.total_pages,
        )
