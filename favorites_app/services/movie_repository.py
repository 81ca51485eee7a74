"""Catalog access expressed in display models."""

from __future__ import annotations

from favorites_app.schemas.movie import Movie, PopularMoviesPage
from favorites_app.services.movie_mapper import map_to_movie
from favorites_app.services.tmdb_client import TmdbClient
from favorites_app.settings import DEFAULT_POSTER_BASE_URL


class MovieRepository:
    """Fetch popular movies and map them with :func:`map_to_movie`."""

    def __init__(
        self, client: TmdbClient, *, poster_base_url: str = DEFAULT_POSTER_BASE_URL
    ) -> None:
        self._client = client
        self._poster_base_url = poster_base_url

    async def get_popular_page(self, page: int = 1) -> PopularMoviesPage:
        response = await self._client.fetch_popular(page)
        return PopularMoviesPage(
            page=response.page,
            total_pages=response.total_pages,
            results=[
                map_to_movie(remote, poster_base_url=self._poster_base_url)
                for remote in response.results
            ],
        )

    async def get_popular_movies(self, page: int = 1) -> list[Movie]:
        return (await self.get_popular_page(page)).results

    async def find_popular_movie(self, movie_id: str, *, page: int = 1) -> Movie | None:
        """Return the movie with ``movie_id`` from one popular page, if listed."""

        movies = await self.get_popular_movies(page)
        return next((movie for movie in movies if movie.id == movie_id), None)
