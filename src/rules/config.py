from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "sdkref.toml"

DEFAULT_DOC_EXTENSIONS = [".md", ".mdx", ".markdown"]
DEFAULT_LANGUAGES = ["kotlin", "kt", "java"]
DEFAULT_IGNORE_PACKAGES = ["android", "androidx", "java", "javax", "kotlin", "kotlinx"]

# Kotlin/Java standard-library names that show up in nearly every snippet.
DEFAULT_IGNORE_SYMBOLS = [
    "Any",
    "Boolean",
    "Double",
    "Exception",
    "Float",
    "Int",
    "List",
    "Log",
    "Long",
    "Map",
    "Object",
    "Set",
    "String",
    "Unit",
    "also",
    "apply",
    "arrayOf",
    "emptyList",
    "forEach",
    "lazy",
    "let",
    "listOf",
    "map",
    "mapOf",
    "mutableListOf",
    "println",
    "repeat",
    "run",
    "setOf",
    "toString",
    "with",
]


class CheckerConfig(BaseModel):
    """Configuration for a documentation/SDK consistency check."""

    model_config = ConfigDict(extra="forbid")

    doc_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOC_EXTENSIONS),
        description="File extensions treated as documentation",
    )
    languages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LANGUAGES),
        description="Fence language tags whose snippets are scanned",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for documents to include (empty = all)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for documents to exclude",
    )
    sdk_include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for SDK sources to include (empty = all)",
    )
    sdk_exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for SDK sources to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description="Enable nested .gitignore composition (default: root-only)",
    )
    fail_threshold: float = Field(
        default=100.0,
        ge=0.0,
        le=100.0,
        description="Minimum coverage percent below which the check fails",
    )
    exclude_ambiguous: bool = Field(
        default=False,
        description="Leave ambiguous matches out of the coverage denominator",
    )
    count_low_confidence: bool = Field(
        default=True,
        description="Count kind=unknown references in the coverage figure",
    )
    ignore_symbols: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_SYMBOLS),
        description="Names never reported as SDK references",
    )
    ignore_packages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PACKAGES),
        description="Package prefixes whose imports are not SDK references",
    )
    report_undocumented: bool = Field(
        default=False,
        description="List public SDK symbols that no document references",
    )
    jobs: int = Field(
        default=1,
        ge=1,
        description="Worker threads for document and SDK parsing",
    )

    @field_validator("doc_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v: Any) -> Any:
        """Accept extensions with or without the leading dot."""
        if not isinstance(v, list):
            msg = "doc_extensions must be a list of strings"
            raise TypeError(msg)
        normalized: list[str] = []
        for ext in v:
            if not isinstance(ext, str) or not ext.strip("."):
                msg = f"Invalid document extension: {ext!r}"
                raise ValueError(msg)
            ext = ext.lower()
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @field_validator("languages", mode="before")
    @classmethod
    def normalize_languages(cls, v: Any) -> Any:
        if not isinstance(v, list):
            msg = "languages must be a list of fence language tags"
            raise TypeError(msg)
        return [str(tag).strip().lower() for tag in v if str(tag).strip()]


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path, path: Path | None = None) -> CheckerConfig:
    """Load configuration from ``sdkref.toml``.

    Args:
        root: Docs root; ``root / sdkref.toml`` is used when present.
        path: Explicit config file. Must exist when given.

    Returns:
        The validated configuration, or defaults when no file is found.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or does
            not validate against ``CheckerConfig``.
    """
    if path is None:
        config_path = Path(root) / CONFIG_FILENAME
        if not config_path.is_file():
            return CheckerConfig()
    else:
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {config_path}"
            raise ConfigError(msg)

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return CheckerConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
