"""Favorites domain components split by responsibility.

Persistence backends live in :mod:`.persistence`, change fan-out in
:mod:`.notifier`, and the public read/write surface in :mod:`.store` and
:mod:`.membership`.
"""

from .membership import FavoriteMembershipView
from .notifier import (
    ChangeEvent,
    ChangeKind,
    ChangeNotifier,
    Subscription,
    live_values,
)
from .persistence import (
    InMemoryFavoritesPersistence,
    PersistentStore,
    SqlFavoritesPersistence,
    build_persistence,
)
from .store import FavoritesStore

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "ChangeNotifier",
    "FavoriteMembershipView",
    "FavoritesStore",
    "InMemoryFavoritesPersistence",
    "PersistentStore",
    "SqlFavoritesPersistence",
    "Subscription",
    "build_persistence",
    "live_values",
]
