"""Logging section of the run configuration and its CLI flags."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from barrier_lattice.utils.logging_config import setup_logging

DEFAULT_LOGGING: dict[str, Any] = {
    "level": "INFO",
    "format": "%(asctime)s %(levelname)s %(shortname)s - %(message)s",
    "file": None,
    "color": True,
    "modules": {},
}

# Alternative key names accepted in YAML files.
_ALIASES = {"fmt_console": "format", "log_file": "file", "colored": "color"}


def add_logging_args(parser) -> None:
    group = parser.add_argument_group("logging")
    group.add_argument("--log-level", type=str, default=None, help="Logging level (e.g. INFO, DEBUG).")
    group.add_argument("--log-file", type=str, default=None, help="Optional log file path.")
    group.add_argument("--log-format", type=str, default=None, help="Console log format string.")
    group.add_argument(
        "--color", dest="log_color", action="store_true", help="Enable colored console logs."
    )
    group.add_argument(
        "--no-color", dest="log_color", action="store_false", help="Disable colored console logs."
    )
    parser.set_defaults(log_color=None)


def normalize_logging_config(config: Mapping[str, Any] | None) -> dict[str, Any]:
    """Fill defaults and map alias keys; `None` values never override."""
    merged = dict(DEFAULT_LOGGING)
    for key, value in (config or {}).items():
        if value is None:
            continue
        merged[_ALIASES.get(key, key)] = value
    return merged


def setup_logging_from_config(config: Mapping[str, Any] | None) -> None:
    cfg = normalize_logging_config(config)
    setup_logging(
        cfg["level"],
        fmt_console=cfg["format"],
        log_file=cfg["file"],
        module_levels=cfg["modules"],
        colored=bool(cfg["color"]),
    )
