"""Pydantic schemas for API responses and upstream payloads."""

from favorites_app.schemas.favorites import (  # noqa: F401
    FavoritesListResponse,
    FavoriteStatus,
)
from favorites_app.schemas.movie import Movie, PopularMoviesPage  # noqa: F401
from favorites_app.schemas.tmdb import (  # noqa: F401
    PopularMoviesResponse,
    RemoteMovie,
)
