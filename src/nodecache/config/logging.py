"""Shared logging helpers for nodecache."""

from __future__ import annotations

import logging


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger for CLI use.

    ``level`` takes a number or a level name such as ``"DEBUG"``. Pass
    ``force=True`` to replace handlers installed earlier (tests do).
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
