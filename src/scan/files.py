"""File scanning utilities for documentation and SDK source trees."""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)

# Directory names that never hold hand-written sources or docs.
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset(
    {".git", ".gradle", ".idea", "build", "node_modules"}
)


def _should_include_file(
    path: Path,
    directory: Path,
    skip_dirs: Collection[str],
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if any(part in skip_dirs for part in rel_path.parts[:-1]):
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path for path in gitignore_paths if path.is_file() and not path.is_symlink()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def find_files(
    directory: Path,
    extensions: Collection[str],
    *,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
    skip_dirs: Collection[str] = DEFAULT_SKIP_DIRS,
) -> Iterator[Path]:
    """Find files with the given extensions, respecting .gitignore.

    Args:
        directory: Directory to search
        extensions: Lower-case suffixes to match (e.g. ``{".md", ".mdx"}``)
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Compose every .gitignore under ``directory``
            instead of only the root one
        skip_dirs: Directory names whose contents are never returned

    Yields:
        Path objects for each matching file, sorted lexicographically by
        relative path for deterministic ordering.
    """
    wanted = {ext.lower() for ext in extensions}
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    matched_files = [
        path
        for path in directory.rglob("*")
        if path.suffix.lower() in wanted
        and _should_include_file(
            path,
            directory,
            skip_dirs,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())
    logger.debug(
        "Found %d file(s) with %s under %s",
        len(matched_files),
        ", ".join(sorted(wanted)),
        directory,
    )

    yield from matched_files


__all__ = ["DEFAULT_SKIP_DIRS", "_should_include_file", "find_files"]
