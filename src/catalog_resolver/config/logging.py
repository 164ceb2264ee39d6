"""Shared logging helpers for the resolver."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Stage decisions and cache hits log at INFO, degradations at WARNING. Pass
    ``force=True`` to reconfigure from tests or embedding applications.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
