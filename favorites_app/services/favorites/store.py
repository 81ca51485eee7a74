"""The favorites store: single writer, live readers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Coroutine
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, TypeVar

from favorites_app.schemas.movie import Movie

from .membership import FavoriteMembershipView
from .notifier import ChangeKind, ChangeNotifier, Subscription, live_values
from .persistence import PersistentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FavoritesStore:
    """Own the favorites list and publish every committed change.

    Writes are serialized through one lock so concurrent ``add``/``remove``
    calls never race.  Each write runs shielded from the caller's cancellation:
    the backend transaction either commits and is published, or rolls back.

    Live reads are async context managers yielding async iterators::

        async with store.all() as favorites:
            async for movies in favorites:
                ...

    Leaving the ``async with`` block releases the subscription.
    """

    def __init__(
        self,
        persistence: PersistentStore,
        *,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self._persistence = persistence
        self._notifier = notifier or ChangeNotifier()
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task[Any]] = set()
        self.membership = FavoriteMembershipView(self)

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    async def open(self) -> None:
        await self._persistence.open()

    async def close(self) -> None:
        """Wait for in-flight writes, end live channels, release the backend."""

        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)
        self._notifier.close()
        await self._persistence.close()

    async def add(self, movie: Movie) -> None:
        """Persist ``movie``, replacing any favorite with the same id."""

        await self._shielded(self._commit_add(movie))

    async def remove(self, movie_id: str) -> None:
        """Delete the favorite with ``movie_id``; absent ids are ignored."""

        await self._shielded(self._commit_remove(movie_id))

    async def list_favorites(self) -> list[Movie]:
        return await self._persistence.list_all()

    async def contains(self, movie_id: str) -> bool:
        return await self._persistence.contains(movie_id)

    @asynccontextmanager
    async def all(self) -> AsyncIterator[AsyncIterator[list[Movie]]]:
        """Live list of favorites: current value first, then one per change."""

        subscription = self._notifier.subscribe()
        stream = live_values(subscription, self._persistence.list_all)
        try:
            yield stream
        finally:
            subscription.close()
            await stream.aclose()

    def is_favorite(
        self, movie_id: str
    ) -> AbstractAsyncContextManager[AsyncIterator[bool]]:
        """Live membership of ``movie_id``; see :class:`FavoriteMembershipView`."""

        return self.membership.watch(movie_id)

    def subscribe(self, movie_id: str | None = None) -> Subscription:
        return self._notifier.subscribe(movie_id)

    async def _shielded(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a write so that cancelling the caller cannot interrupt it.

        The write task stays tracked until it finishes so :meth:`close` can
        wait for it.  A failure that arrives after the caller was cancelled
        is logged.
        """

        task = asyncio.ensure_future(coro)
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(self._orphaned_write_done)
            raise

    def _orphaned_write_done(self, task: asyncio.Task[Any]) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Favorites write failed after its caller was cancelled: %s",
                task.exception(),
                exc_info=task.exception(),
            )

    async def _commit_add(self, movie: Movie) -> None:
        async with self._write_lock:
            await self._persistence.upsert(movie)
            self._notifier.publish(ChangeKind.ADDED, movie.id)
        logger.debug("Added favorite %s (%s)", movie.id, movie.title)

    async def _commit_remove(self, movie_id: str) -> bool:
        async with self._write_lock:
            removed = await self._persistence.delete(movie_id)
            if removed:
                self._notifier.publish(ChangeKind.REMOVED, movie_id)
        if removed:
            logger.debug("Removed favorite %s", movie_id)
        else:
            logger.debug("Remove ignored; %s is not a favorite", movie_id)
        return removed
