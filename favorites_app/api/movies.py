"""FastAPI router for the remote movie catalog."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from favorites_app.schemas.movie import PopularMoviesPage
from favorites_app.services.dependencies import get_movie_repository
from favorites_app.services.movie_repository import MovieRepository

router = APIRouter()


@router.get("/popular", response_model=PopularMoviesPage)
async def popular_movies(
    page: int = Query(1, ge=1, description="1-based catalog page"),
    repository: MovieRepository = Depends(get_movie_repository),
) -> PopularMoviesPage:
    """Return one page of popular movies mapped into display models."""

    return await repository.get_popular_page(page)
