"""SQLAlchemy declarative base and ORM models."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


from .favorites import SCHEMA_VERSION, FavoriteMovie, SchemaVersion  # noqa: E402

__all__ = ["Base", "FavoriteMovie", "SCHEMA_VERSION", "SchemaVersion"]
