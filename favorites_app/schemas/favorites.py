"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from pydantic import BaseModel, Field

from favorites_app.schemas.movie import Movie


class FavoritesListResponse(BaseModel):
    """Current favorites in store order."""

    total: int = Field(..., ge=0)
    favorites: list[Movie] = Field(default_factory=list)


class FavoriteStatus(BaseModel):
    """Membership of a single movie in the favorites list."""

    movie_id: str = Field(..., description="Identifier that was checked")
    is_favorite: bool
