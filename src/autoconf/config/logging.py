"""Logging setup for the command line."""

from __future__ import annotations

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Alembic reports every revision check at INFO; only show it when verbose.
_CHATTY_LOGGERS: Final[tuple[str, ...]] = ("alembic",)


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Log reconciliation summaries, or every record operation with ``verbose``."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
