"""Per-movie "is this a favorite" live booleans derived from the store."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from .notifier import live_values

if TYPE_CHECKING:
    from .store import FavoritesStore


class FavoriteMembershipView:
    """Project the store's change stream onto one boolean per movie id.

    Each :meth:`watch` call registers a subscription scoped to its id, so
    mutating movie A never wakes a watcher of movie B.  Membership is read
    with an indexed existence query rather than by scanning the full list.
    The first value is emitted immediately; later values are emitted only
    when presence actually flips.
    """

    def __init__(self, store: FavoritesStore) -> None:
        self._store = store

    @asynccontextmanager
    async def watch(self, movie_id: str) -> AsyncIterator[AsyncIterator[bool]]:
        subscription = self._store.subscribe(movie_id)

        async def _read() -> bool:
            return await self._store.contains(movie_id)

        stream = live_values(subscription, _read)
        try:
            yield stream
        finally:
            subscription.close()
            await stream.aclose()

    def active_watchers(self, movie_id: str) -> int:
        return self._store.notifier.subscriber_count(movie_id)
