"""Storage backends for the favorites list.

:class:`PersistentStore` is the capability the store depends on.  Two
implementations exist and one is chosen at startup from configuration:

* :class:`SqlFavoritesPersistence` keeps rows in a SQLAlchemy-managed database
  (SQLite through ``aiosqlite`` by default, PostgreSQL when configured).
* :class:`InMemoryFavoritesPersistence` keeps rows in a dict and is lost on
  exit; useful for demos and tests.

Every mutation is a single transaction, so a concurrent reader observes either
the previous or the new state of a record.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol, runtime_checkable

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from favorites_app.db.connection import (
    create_engine,
    create_session_factory,
    initialize_schema,
)
from favorites_app.db.models import FavoriteMovie
from favorites_app.errors import StorageFault
from favorites_app.schemas.movie import Movie
from favorites_app.settings import AppSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistentStore(Protocol):
    async def open(self) -> None:
        """Prepare the backend (create schema, verify version)."""

    async def close(self) -> None:
        """Release connections or other handles held by the backend."""

    async def upsert(self, movie: Movie) -> None:
        """Insert ``movie`` or replace the record that shares its id."""

    async def delete(self, movie_id: str) -> bool:
        """Delete a record; return ``True`` only when a row was removed."""

    async def list_all(self) -> list[Movie]:
        """Return every record in insertion order."""

    async def contains(self, movie_id: str) -> bool:
        """Return whether a record with ``movie_id`` exists."""


def _row_to_movie(row: FavoriteMovie) -> Movie:
    return Movie(
        id=row.id,
        title=row.title,
        genre=row.genre,
        year=row.year,
        duration=row.duration,
        rating=row.rating,
        poster_url=row.poster_url,
        synopsis=row.synopsis,
    )


class SqlFavoritesPersistence(PersistentStore):
    """Persist favorites through SQLAlchemy's async ORM."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session inside one transaction, translating driver errors."""

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Favorites %s failed: %s", operation, exc)
            raise StorageFault(f"Favorites {operation} failed: {exc}") from exc

    async def open(self) -> None:
        version = await initialize_schema(self._engine)
        logger.debug("Favorites database ready at schema version %s", version)

    async def close(self) -> None:
        await self._engine.dispose()

    async def upsert(self, movie: Movie) -> None:
        async with self._session("upsert") as session:
            next_position = await session.scalar(
                select(func.coalesce(func.max(FavoriteMovie.position), -1) + 1)
            )
            row = await session.get(FavoriteMovie, movie.id)
            if row is None:
                row = FavoriteMovie(id=movie.id)
                session.add(row)
            row.title = movie.title
            row.genre = movie.genre
            row.year = movie.year
            row.duration = movie.duration
            row.rating = movie.rating
            row.poster_url = movie.poster_url
            row.synopsis = movie.synopsis
            row.position = next_position

    async def delete(self, movie_id: str) -> bool:
        async with self._session("delete") as session:
            result = await session.execute(
                delete(FavoriteMovie).where(FavoriteMovie.id == movie_id)
            )
            return result.rowcount > 0

    async def list_all(self) -> list[Movie]:
        async with self._session("list") as session:
            result = await session.execute(
                select(FavoriteMovie).order_by(
                    FavoriteMovie.position, FavoriteMovie.id
                )
            )
            return [_row_to_movie(row) for row in result.scalars().all()]

    async def contains(self, movie_id: str) -> bool:
        async with self._session("lookup") as session:
            found = await session.scalar(
                select(exists().where(FavoriteMovie.id == movie_id))
            )
            return bool(found)


class InMemoryFavoritesPersistence(PersistentStore):
    """Dict-backed store used when no durable database is wanted."""

    def __init__(self) -> None:
        self._movies: dict[str, Movie] = {}

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def upsert(self, movie: Movie) -> None:
        # Re-adding moves the movie to the end, matching the SQL backend.
        self._movies.pop(movie.id, None)
        self._movies[movie.id] = movie

    async def delete(self, movie_id: str) -> bool:
        return self._movies.pop(movie_id, None) is not None

    async def list_all(self) -> list[Movie]:
        return list(self._movies.values())

    async def contains(self, movie_id: str) -> bool:
        return movie_id in self._movies


def build_persistence(settings: AppSettings) -> PersistentStore:
    """Select the storage backend named by ``STORE_BACKEND``."""

    if settings.store_backend == "memory":
        logger.info("Using in-memory favorites store")
        return InMemoryFavoritesPersistence()

    logger.info("Using %s favorites store", settings.database_type)
    return SqlFavoritesPersistence(create_engine(settings.resolved_database_url))
