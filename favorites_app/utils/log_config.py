"""Root logger configuration shared by the API and the CLI."""

from __future__ import annotations

import logging

from favorites_app.settings import AppSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: AppSettings, *, level: str | None = None) -> None:
    """Apply the configured level (or an explicit override) to the root logger."""

    resolved = settings.log_level_numeric
    if level is not None:
        candidate = logging.getLevelName(level.upper())
        if isinstance(candidate, int):
            resolved = candidate
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
