"""Shared CLI helpers for app entrypoints."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any


def add_print_config_arg(parser) -> None:
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print merged config (JSON) and exit.",
    )


def add_dry_run_arg(parser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and log the pricing plan without pricing.",
    )


def collect_logging_overrides(args) -> dict[str, Any]:
    """Logging section overrides from parsed `add_logging_args` flags."""
    flags = {
        "level": getattr(args, "log_level", None),
        "file": getattr(args, "log_file", None),
        "format": getattr(args, "log_format", None),
        "color": getattr(args, "log_color", None),
    }
    return {key: value for key, value in flags.items() if value is not None}


def to_jsonable(obj: Any) -> Any:
    """Convert paths, dates, mappings and sequences for `json.dumps`."""
    if isinstance(obj, (Path, date)):
        return str(obj)
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(v) for v in obj]
    return obj


def print_config(config: Mapping[str, Any]) -> None:
    print(json.dumps(to_jsonable(config), indent=2, sort_keys=True))


def log_dry_run(logger, plan: Mapping[str, Any]) -> None:
    logger.info("DRY RUN: nothing was priced.")
    logger.info("DRY RUN plan:\n%s", json.dumps(to_jsonable(plan), indent=2, sort_keys=True))
