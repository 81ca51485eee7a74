"""Payload builders shared by the catalog, API, and CLI suites."""

from __future__ import annotations

from pathlib import Path
from typing import Any


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


def remote_movie(movie_id: int, **overrides: Any) -> dict[str, Any]:
    """One TMDB result entry, including keys the application ignores."""

    entry: dict[str, Any] = {
        "adult": False,
        "genre_ids": [18],
        "id": movie_id,
        "original_language": "en",
        "title": f"Remote {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "release_date": "1999-03-31",
        "vote_average": 8.2,
        "overview": f"Overview {movie_id}",
    }
    entry.update(overrides)
    return entry


def popular_payload(
    *movies: dict[str, Any], page: int = 1, total_pages: int = 3
) -> dict[str, Any]:
    """Build a TMDB ``/movie/popular`` body around ``movies``."""

    return {
        "page": page,
        "results": list(movies),
        "total_pages": total_pages,
        "total_results": total_pages * 20,
    }
