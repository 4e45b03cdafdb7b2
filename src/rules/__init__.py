"""Configuration and extraction rule definitions for sdkref-core."""

from rules.config import (
    CheckerConfig,
    ConfigError,
    load_config,
)
from rules.extraction import DEFAULT_RULES, ExtractionRule

__all__ = [
    "DEFAULT_RULES",
    "CheckerConfig",
    "ConfigError",
    "ExtractionRule",
    "load_config",
]
