"""Logging setup for command-line entrypoints.

Library modules only create `logger = logging.getLogger(__name__)`; an
entrypoint calls `setup_logging(...)` once. The console handler adds
`record.shortname` (last dotted component of the logger name) so console
formats may use `%(shortname)s`, e.g. `calibration` instead of
`barrier_lattice.tree.calibration`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

_LEVEL_NAMES: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


class _ShortNameFilter(logging.Filter):
    """Attach `record.shortname` without touching `record.name`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.shortname = record.name.rsplit(".", 1)[-1]
        return True


class _ColorFormatter(logging.Formatter):
    """Console formatter colouring the level name with ANSI codes."""

    _RESET = "\033[0m"
    _COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self._RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def coerce_level(level: int | str) -> int:
    """Turn `logging.INFO`, `"info"` or `"20"` into a numeric level."""
    if isinstance(level, int):
        return level
    name = str(level).strip().upper()
    if not name:
        raise ValueError("Empty logging level")
    if name.isdigit():
        return int(name)
    try:
        return _LEVEL_NAMES[name]
    except KeyError as e:
        raise ValueError(f"Unknown logging level: {level!r}") from e


def setup_logging(
    level: int | str = "INFO",
    *,
    fmt_console: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    fmt_file: str = "%(asctime)s %(levelname)s %(name)s - %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    log_file: str | Path | None = None,
    module_levels: Mapping[str, int | str] | None = None,
    colored: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Root level as int or name.
        fmt_console: Console format; `%(shortname)s` is available.
        fmt_file: Format of the optional file handler.
        datefmt: Timestamp format shared by both handlers.
        log_file: Also write uncoloured logs to this file.
        module_levels: Per-logger level overrides, e.g.
            `{"barrier_lattice.tree": "DEBUG"}`.
        colored: Colour console level names.

    Existing handlers are replaced (`force=True`) so repeated calls do not
    duplicate output.
    """
    console = logging.StreamHandler()
    console.addFilter(_ShortNameFilter())
    formatter_cls = _ColorFormatter if colored else logging.Formatter
    console.setFormatter(formatter_cls(fmt=fmt_console, datefmt=datefmt))
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=fmt_file, datefmt=datefmt))
        handlers.append(file_handler)

    logging.basicConfig(level=coerce_level(level), handlers=handlers, force=True)

    for name, lvl in (module_levels or {}).items():
        logging.getLogger(name).setLevel(coerce_level(lvl))
