"""Exception taxonomy shared by the storage, catalog, and presentation layers."""

from __future__ import annotations


class FavoritesAppError(Exception):
    """Base class for failures the application surfaces to its callers."""


class StorageFault(FavoritesAppError):
    """The persistent store failed (I/O error, corruption, or schema mismatch).

    Faults are fatal to the operation that raised them and are never retried.
    """


class UpstreamFault(FavoritesAppError):
    """The remote movie catalog could not be fetched or decoded."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = ["FavoritesAppError", "StorageFault", "UpstreamFault"]
