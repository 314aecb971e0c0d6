# Path: config/log.py
# Purpose: Configure application logging from settings.
# Layer: config.
# Details: Installs a single stream handler on the root logger; safe to call more than once.

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach one formatted stream handler to the root logger at the given level."""

    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    for handler in root.handlers:
        if getattr(handler, "_animaldex", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._animaldex = True  # type: ignore[attr-defined]
    root.addHandler(handler)
