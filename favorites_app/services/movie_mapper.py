"""Conversion from TMDB wire models to display movies."""

from __future__ import annotations

from favorites_app.schemas.movie import Movie
from favorites_app.schemas.tmdb import RemoteMovie
from favorites_app.settings import DEFAULT_POSTER_BASE_URL

# TMDB's popular listing carries neither genre names nor runtimes.
PLACEHOLDER_GENRE = "Movie"
UNKNOWN_DURATION = "N/A"
UNKNOWN_YEAR = "Unknown"


def map_to_movie(remote: RemoteMovie, *, poster_base_url: str = DEFAULT_POSTER_BASE_URL) -> Movie:
    year = remote.release_date[:4] if remote.release_date else UNKNOWN_YEAR
    poster_url = f"{poster_base_url}{remote.poster_path}" if remote.poster_path else ""
    return Movie(
        id=str(remote.id),
        title=remote.title,
        genre=PLACEHOLDER_GENRE,
        year=year,
        duration=UNKNOWN_DURATION,
        rating=remote.vote_average,
        poster_url=poster_url,
        synopsis=remote.overview,
    )
