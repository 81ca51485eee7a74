"""Pydantic schemas describing movies as the application displays and stores them."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TEXT_FIELDS = ("title", "genre", "year", "duration", "poster_url", "synopsis")


class Movie(BaseModel):
    """Display model for a movie; persisted as-is when the user favorites it.

    Every attribute except ``id`` may be blank, but none may be ``None`` so the
    persisted schema never needs nullable columns.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable external identifier")
    title: str = Field("", description="Display title")
    genre: str = Field("", description="Display genre label")
    year: str = Field(
        "",
        description="Display-formatted release year; not necessarily an integer.",
    )
    duration: str = Field("", description="Display-formatted runtime, e.g. '2h 32m'")
    rating: float = Field(
        0.0,
        description="Average rating, expected between 0.0 and 10.0 (not enforced).",
    )
    poster_url: str = Field("", description="Absolute poster URL or empty string")
    synopsis: str = Field("", description="Plot overview or empty string")

    @field_validator("id")
    @classmethod
    def _reject_blank_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Movie id must not be blank")
        return value

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("rating", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class PopularMoviesPage(BaseModel):
    """One page of the popular catalog mapped into display models."""

    page: int = Field(..., ge=1)
    total_pages: int = Field(1, ge=0)
    results: list[Movie] = Field(default_factory=list)

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages
