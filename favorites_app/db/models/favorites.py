"""SQLAlchemy ORM models for the locally persisted favorites list.

One row per favorited movie, keyed by the catalog identifier.  Every display
column is ``NOT NULL`` with an empty default so rows always round-trip into a
complete :class:`~favorites_app.schemas.movie.Movie`.  A single-row
``schema_version`` table records which layout the database file was created
with.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from . import Base

SCHEMA_VERSION = 1


def utcnow():
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class FavoriteMovie(Base):
    """A movie the user marked as favorite."""

    __tablename__ = "favorite_movies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(
        String(512), nullable=False, default="", server_default=""
    )
    genre: Mapped[str] = mapped_column(
        String(128), nullable=False, default="", server_default=""
    )
    year: Mapped[str] = mapped_column(
        String(16), nullable=False, default="", server_default=""
    )
    duration: Mapped[str] = mapped_column(
        String(32), nullable=False, default="", server_default=""
    )
    rating: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default="0"
    )
    poster_url: Mapped[str] = mapped_column(
        String(1024), nullable=False, default="", server_default=""
    )
    synopsis: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=""
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        index=True,
        doc=(
            "Monotonic insertion counter.  Re-adding a movie assigns a fresh"
            " value, so listings ordered by position follow the latest add."
        ),
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class SchemaVersion(Base):
    """Single-row table holding the layout version of the database file."""

    __tablename__ = "schema_version"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
