"""Tests for the favorites store's write discipline and live read channels.

Every test runs against both storage backends through the ``store`` fixture.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from typing import TypeVar, get_type_hints

import pytest

from favorites_app.errors import StorageFault
from favorites_app.schemas.movie import Movie
from favorites_app.services.favorites import (
    ChangeNotifier,
    FavoritesStore,
    InMemoryFavoritesPersistence,
    Subscription,
)

T = TypeVar("T")


async def _next(stream: AsyncIterator[T], timeout: float = 2.0) -> T:
    return await asyncio.wait_for(anext(stream), timeout)


@pytest.mark.asyncio
async def test_add_then_all_contains_exactly_that_record(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    movie = make_movie("42")

    await store.add(movie)

    async with store.all() as favorites:
        assert await _next(favorites) == [movie]


@pytest.mark.asyncio
async def test_add_same_id_keeps_latest_fields_only(store: FavoritesStore) -> None:
    first = Movie(
        id="1",
        title="A",
        genre="Drama",
        year="2001",
        duration="1h",
        rating=7.5,
        poster_url="",
        synopsis="",
    )
    second = first.model_copy(update={"title": "A2"})

    await store.add(first)
    await store.add(second)

    favorites = await store.list_favorites()
    assert len(favorites) == 1
    assert favorites[0].title == "A2"


@pytest.mark.asyncio
async def test_remove_missing_id_is_silent_and_emits_nothing(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    movie = make_movie("1")
    await store.add(movie)

    async with store.all() as favorites:
        assert await _next(favorites) == [movie]
        sequence_before = store.notifier.sequence

        await store.remove("does-not-exist")

        assert store.notifier.sequence == sequence_before
        with pytest.raises(asyncio.TimeoutError):
            await _next(favorites, timeout=0.1)

    assert await store.list_favorites() == [movie]


@pytest.mark.asyncio
async def test_all_emits_current_list_then_each_change(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    first, second = make_movie("1"), make_movie("2")

    async with store.all() as favorites:
        assert await _next(favorites) == []

        await store.add(first)
        assert await _next(favorites) == [first]

        await store.add(second)
        assert await _next(favorites) == [first, second]

        await store.remove("1")
        assert await _next(favorites) == [second]


@pytest.mark.asyncio
async def test_slow_reader_eventually_sees_latest_state(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    async with store.all() as favorites:
        assert await _next(favorites) == []

        for movie_id in ("1", "2", "3"):
            await store.add(make_movie(movie_id))
        await store.remove("2")

        assert [movie.id for movie in await _next(favorites)] == ["1", "3"]


@pytest.mark.asyncio
async def test_is_favorite_starts_false_then_follows_add_and_remove(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    async with store.is_favorite("42") as membership:
        assert await _next(membership) is False

        await store.add(make_movie("42"))
        assert await _next(membership) is True

        await store.remove("42")
        assert await _next(membership) is False


@pytest.mark.asyncio
async def test_is_favorite_initial_value_reflects_existing_record(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    await store.add(make_movie("42"))

    async with store.is_favorite("42") as membership:
        assert await _next(membership) is True


@pytest.mark.asyncio
async def test_concurrent_reader_observes_writes_from_another_task(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    seen: list[bool] = []
    ready = asyncio.Event()

    async def reader() -> None:
        async with store.is_favorite("7") as membership:
            async for value in membership:
                seen.append(value)
                ready.set()
                if seen == [False, True, False]:
                    return

    task = asyncio.create_task(reader())
    await asyncio.wait_for(ready.wait(), 2)

    await store.add(make_movie("7"))
    while len(seen) < 2:
        await asyncio.sleep(0.01)
    await store.remove("7")

    await asyncio.wait_for(task, 2)
    assert seen == [False, True, False]


@pytest.mark.asyncio
async def test_concurrent_adds_are_all_persisted(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    movies = [make_movie(str(index)) for index in range(20)]

    await asyncio.gather(*(store.add(movie) for movie in movies))

    favorites = await store.list_favorites()
    assert sorted(movie.id for movie in favorites) == sorted(movie.id for movie in movies)


@pytest.mark.asyncio
async def test_leaving_all_releases_the_subscription(store: FavoritesStore) -> None:
    async with store.all() as favorites:
        await _next(favorites)
        assert store.notifier.subscriber_count() == 1

    assert store.notifier.subscriber_count() == 0


@pytest.mark.asyncio
async def test_cancelled_reader_releases_the_subscription(
    store: FavoritesStore,
) -> None:
    started = asyncio.Event()

    async def reader() -> None:
        async with store.all() as favorites:
            async for _ in favorites:
                started.set()

    task = asyncio.create_task(reader())
    await asyncio.wait_for(started.wait(), 2)
    assert store.notifier.subscriber_count() == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.notifier.subscriber_count() == 0


@pytest.mark.asyncio
async def test_cancelled_add_leaves_a_complete_record(
    store: FavoritesStore, make_movie: Callable[..., Movie]
) -> None:
    movie = make_movie("42")

    task = asyncio.create_task(store.add(movie))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # Queues behind the shielded write, so the first add has settled.
    await store.add(make_movie("sentinel"))

    assert movie in await store.list_favorites()


@pytest.mark.asyncio
async def test_close_ends_live_channels(make_movie: Callable[..., Movie]) -> None:
    store = FavoritesStore(InMemoryFavoritesPersistence())
    await store.open()
    received: list[list[Movie]] = []

    async def reader() -> None:
        async with store.all() as favorites:
            async for movies in favorites:
                received.append(movies)

    task = asyncio.create_task(reader())
    await asyncio.sleep(0.01)
    await store.close()

    await asyncio.wait_for(task, 2)
    assert received == [[]]


class _FailingPersistence(InMemoryFavoritesPersistence):
    async def upsert(self, movie: Movie) -> None:
        raise StorageFault("disk full")


@pytest.mark.asyncio
async def test_storage_fault_propagates_and_publishes_nothing(
    make_movie: Callable[..., Movie],
) -> None:
    notifier = ChangeNotifier()
    store = FavoritesStore(_FailingPersistence(), notifier=notifier)

    with pytest.raises(StorageFault, match="disk full"):
        await store.add(make_movie("42"))

    assert notifier.sequence == 0


class _FailingDeletePersistence(InMemoryFavoritesPersistence):
    async def delete(self, movie_id: str) -> bool:
        raise StorageFault("database is locked")


@pytest.mark.asyncio
async def test_remove_storage_fault_propagates_and_publishes_nothing(
    make_movie: Callable[..., Movie],
) -> None:
    store = FavoritesStore(_FailingDeletePersistence())
    await store.add(make_movie("42"))
    sequence_before = store.notifier.sequence

    with pytest.raises(StorageFault, match="database is locked"):
        await store.remove("42")

    assert store.notifier.sequence == sequence_before
    assert await store.contains("42") is True


class _FailingLookupPersistence(InMemoryFavoritesPersistence):
    async def contains(self, movie_id: str) -> bool:
        raise StorageFault("disk I/O error")


@pytest.mark.asyncio
async def test_live_membership_surfaces_read_failure() -> None:
    store = FavoritesStore(_FailingLookupPersistence())

    with pytest.raises(StorageFault, match="disk I/O error"):
        async with store.is_favorite("42") as membership:
            await _next(membership)

    assert store.membership.active_watchers("42") == 0


class _SlowFailingPersistence(InMemoryFavoritesPersistence):
    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()

    async def upsert(self, movie: Movie) -> None:
        self.started.set()
        await asyncio.sleep(0.05)
        raise StorageFault("disk full")


@pytest.mark.asyncio
async def test_write_failing_after_caller_cancelled_is_logged(
    make_movie: Callable[..., Movie], caplog: pytest.LogCaptureFixture
) -> None:
    persistence = _SlowFailingPersistence()
    store = FavoritesStore(persistence)

    task = asyncio.create_task(store.add(make_movie("42")))
    await asyncio.wait_for(persistence.started.wait(), 1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    with caplog.at_level(logging.ERROR, logger="favorites_app.services.favorites.store"):
        await store.close()
        await asyncio.sleep(0)

    assert "disk full" in caplog.text
    assert store.notifier.sequence == 0


class _SlowPersistence(InMemoryFavoritesPersistence):
    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()
        self.closed_with: list[str] = []

    async def upsert(self, movie: Movie) -> None:
        self.started.set()
        await asyncio.sleep(0.05)
        await super().upsert(movie)

    async def close(self) -> None:
        self.closed_with = [movie.id for movie in await self.list_all()]


@pytest.mark.asyncio
async def test_close_waits_for_in_flight_writes(
    make_movie: Callable[..., Movie],
) -> None:
    persistence = _SlowPersistence()
    store = FavoritesStore(persistence)

    task = asyncio.create_task(store.add(make_movie("42")))
    await asyncio.wait_for(persistence.started.wait(), 1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    await store.close()

    assert persistence.closed_with == ["42"]


def test_live_channel_methods_declare_their_return_types() -> None:
    assert get_type_hints(FavoritesStore.subscribe)["return"] is Subscription
    assert (
        get_type_hints(FavoritesStore.is_favorite)["return"]
        == AbstractAsyncContextManager[AsyncIterator[bool]]
    )


@pytest.mark.asyncio
async def test_subscribe_returns_a_releasable_subscription() -> None:
    store = FavoritesStore(InMemoryFavoritesPersistence())

    subscription = store.subscribe("42")
    assert isinstance(subscription, Subscription)
    assert store.membership.active_watchers("42") == 1

    subscription.close()
    assert store.membership.active_watchers("42") == 0
