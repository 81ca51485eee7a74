"""Wire models for the TMDB ``/movie/popular`` endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RemoteMovie(BaseModel):
    """Single movie as returned by TMDB; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    poster_path: str | None = None
    release_date: str | None = None
    vote_average: float = 0.0
    overview: str = ""


class PopularMoviesResponse(BaseModel):
    """Paginated envelope around :class:`RemoteMovie` results."""

    model_config = ConfigDict(extra="ignore")

    page: int
    results: list[RemoteMovie] = Field(default_factory=list)
    total_pages: int = 1
    total_results: int = 0
