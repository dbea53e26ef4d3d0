"""Configuration and logging helpers for command-line entrypoints."""

from .config import (
    add_config_arg,
    build_config,
    deep_merge,
    load_yaml_config,
    resolve_path,
)
from .logging import (
    DEFAULT_LOGGING,
    add_logging_args,
    normalize_logging_config,
    setup_logging_from_config,
)

__all__ = [
    "DEFAULT_LOGGING",
    "add_config_arg",
    "add_logging_args",
    "build_config",
    "deep_merge",
    "load_yaml_config",
    "normalize_logging_config",
    "resolve_path",
    "setup_logging_from_config",
]
