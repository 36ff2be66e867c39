"""Logging setup for the application entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    # Re-running main() in the same interpreter must not stack handlers.
    for handler in root.handlers:
        if getattr(handler, "_formbuilder", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._formbuilder = True  # type: ignore[attr-defined]
    root.addHandler(handler)
