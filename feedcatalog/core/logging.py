"""Logging setup shared by the API process and its background refresher."""

from __future__ import annotations

import logging


def configure_logging(level: str | int = logging.INFO, *, force: bool = False) -> None:
    """Initialise the root logger with a terse single-line format.

    ``level`` accepts either a logging constant or its name (``"DEBUG"``).
    Pass ``force=True`` to reconfigure handlers already installed, e.g. by uvicorn.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=force,
    )
