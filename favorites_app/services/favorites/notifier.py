"""Change notification channel between the favorites store and its readers.

The store publishes one :class:`ChangeEvent` after every committed mutation.
Readers hold a :class:`Subscription`, optionally scoped to one movie id, and
wait on it cooperatively.  A subscription is a coalescing mailbox: several
events that arrive while its owner is busy collapse into a single wake-up, and
the owner re-reads the committed state, so the latest state is never missed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChangeKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed mutation of a single favorite."""

    sequence: int
    kind: ChangeKind
    movie_id: str


class Subscription:
    """Handle returned by :meth:`ChangeNotifier.subscribe`."""

    def __init__(self, notifier: ChangeNotifier, movie_id: str | None) -> None:
        self._notifier = notifier
        self._pending = asyncio.Event()
        self._closed = False
        self.movie_id = movie_id
        self.last_sequence = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, event: ChangeEvent) -> None:
        self.last_sequence = event.sequence
        self._pending.set()

    async def wait(self) -> bool:
        """Block until a relevant change arrives; ``False`` once closed."""

        if self._closed:
            return False
        await self._pending.wait()
        self._pending.clear()
        return not self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._notifier._discard(self)
        self._pending.set()


class ChangeNotifier:
    """Fan change events out to subscribers, dispatching by movie id.

    Subscriptions without a movie id see every event; scoped subscriptions are
    indexed by id so a mutation only wakes the readers interested in it.
    """

    def __init__(self) -> None:
        self._topics: dict[str | None, set[Subscription]] = {}
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    def subscribe(self, movie_id: str | None = None) -> Subscription:
        subscription = Subscription(self, movie_id)
        self._topics.setdefault(movie_id, set()).add(subscription)
        return subscription

    def subscriber_count(self, movie_id: str | None = None) -> int:
        return len(self._topics.get(movie_id, ()))

    def publish(self, kind: ChangeKind, movie_id: str) -> ChangeEvent:
        self._sequence += 1
        event = ChangeEvent(sequence=self._sequence, kind=kind, movie_id=movie_id)
        for topic in (None, movie_id):
            for subscription in list(self._topics.get(topic, ())):
                subscription._deliver(event)
        logger.debug("Published %s for movie %s (#%s)", kind.value, movie_id, event.sequence)
        return event

    def close(self) -> None:
        """Close every subscription so live readers finish their iteration."""

        for subscriptions in list(self._topics.values()):
            for subscription in list(subscriptions):
                subscription.close()
        self._topics.clear()

    def _discard(self, subscription: Subscription) -> None:
        subscriptions = self._topics.get(subscription.movie_id)
        if subscriptions is None:
            return
        subscriptions.discard(subscription)
        if not subscriptions:
            del self._topics[subscription.movie_id]


async def live_values(
    subscription: Subscription, read: Callable[[], Awaitable[T]]
) -> AsyncIterator[T]:
    """Yield ``read()`` now and again after each change, skipping repeats.

    The subscription must already be registered when this generator starts so
    that a mutation committed between subscribing and the first read still
    wakes the loop.
    """

    current = await read()
    yield current
    while await subscription.wait():
        latest = await read()
        if latest != current:
            current = latest
            yield current
