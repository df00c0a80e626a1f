"""
console.py

Responsibility: Colored status output on stdout via the standard `logging` module.

Records may carry a `color` attribute (`logger.info(..., extra={"color": "blue"})`);
otherwise the color follows the level. Colors are only emitted on a TTY and when
NO_COLOR is unset.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

COLORS = {
    "reset": "\033[0m",
    "red": "\033[91m",
    "green": "\033[92m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "magenta": "\033[95m",
}

_LEVEL_COLORS = {
    logging.DEBUG: "magenta",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}

_LEVEL_PREFIXES = {
    logging.DEBUG: "[Debug]",
    logging.WARNING: "[Warning]",
    logging.ERROR: "[Error]",
    logging.CRITICAL: "[Error]",
}


class ColorFormatter(logging.Formatter):
    def __init__(self, *, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        prefix = _LEVEL_PREFIXES.get(record.levelno)
        if prefix:
            text = f"{prefix}: {text}"
        color = getattr(record, "color", None) or _LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color not in COLORS:
            return text
        return f"{COLORS[color]}{text}{COLORS['reset']}"


def _wants_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Handler:
    """
    Route the `vbuilder` loggers to a single stdout handler. Safe to call repeatedly.
    """
    out = stream if stream is not None else sys.stdout
    handler = logging.StreamHandler(out)
    handler.setFormatter(ColorFormatter(use_color=_wants_color(out)))

    root = logging.getLogger("vbuilder")
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False
    return handler
