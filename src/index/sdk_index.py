"""Immutable lookup tables over the SDK's declared public surface."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from parse.kotlin_symbols import extract_symbols_kotlin
from parse.treesitter_java import extract_symbols_java
from scan.files import find_files
from utils import path_to_package

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping
    from pathlib import Path

    from models.symbols import SdkSymbol

logger = logging.getLogger(__name__)

SDK_SOURCE_EXTENSIONS: dict[str, Callable[[Path, str, str], list[SdkSymbol]]] = {
    ".kt": extract_symbols_kotlin,
    ".kts": extract_symbols_kotlin,
    ".java": extract_symbols_java,
}


class IndexBuildError(Exception):
    """Raised when the SDK root cannot be turned into a symbol index."""


@dataclass(frozen=True)
class SdkSymbolIndex:
    """Read-only symbol tables keyed by qualified name and by simple name.

    Build with :func:`build_index` or :meth:`from_symbols`; an index is never
    updated in place, so it can be shared freely between threads.
    """

    by_qualified_name: Mapping[str, SdkSymbol]
    by_name: Mapping[str, tuple[SdkSymbol, ...]]

    @classmethod
    def from_symbols(cls, symbols: Iterable[SdkSymbol]) -> SdkSymbolIndex:
        """Index symbols; a later declaration of a qualified name replaces an earlier one."""
        qualified: dict[str, SdkSymbol] = {}
        for symbol in symbols:
            qualified[symbol.qualified_name] = symbol

        names: dict[str, list[SdkSymbol]] = {}
        for key in sorted(qualified):
            symbol = qualified[key]
            names.setdefault(symbol.name, []).append(symbol)

        return cls(
            by_qualified_name=MappingProxyType(dict(sorted(qualified.items()))),
            by_name=MappingProxyType(
                {name: tuple(group) for name, group in sorted(names.items())}
            ),
        )

    def __len__(self) -> int:
        return len(self.by_qualified_name)

    def __iter__(self) -> Iterator[SdkSymbol]:
        return iter(self.by_qualified_name.values())

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self.by_qualified_name

    def get(self, qualified_name: str) -> SdkSymbol | None:
        """Exact fully-qualified lookup."""
        return self.by_qualified_name.get(qualified_name)

    def lookup(self, qualified_or_bare_name: str) -> tuple[SdkSymbol, ...]:
        """Find the symbols a (possibly partially qualified) name may denote.

        An exact qualified-name hit wins. A dotted name otherwise matches
        every symbol whose qualified name ends with it (``CloudX.createBanner``
        matches ``io.cloudx.sdk.CloudX.createBanner``); a bare name matches
        every symbol with that simple name. Results are sorted by qualified
        name.
        """
        exact = self.by_qualified_name.get(qualified_or_bare_name)
        if exact is not None:
            return (exact,)

        bare = qualified_or_bare_name.rsplit(".", 1)[-1]
        candidates = self.by_name.get(bare, ())
        if "." not in qualified_or_bare_name:
            return candidates

        suffix = f".{qualified_or_bare_name}"
        return tuple(
            symbol for symbol in candidates if symbol.qualified_name.endswith(suffix)
        )

    def has_type(self, qualified_or_bare_name: str) -> bool:
        """Return True when the name denotes at least one indexed type."""
        return any(symbol.is_type for symbol in self.lookup(qualified_or_bare_name))

    def public_symbols(self) -> tuple[SdkSymbol, ...]:
        return tuple(self.by_qualified_name.values())


def _parse_file(path: Path, root: Path) -> list[SdkSymbol]:
    relative_path = path.relative_to(root).as_posix()
    extractor = SDK_SOURCE_EXTENSIONS[path.suffix.lower()]
    return extractor(path, relative_path, path_to_package(relative_path))


def build_index(
    sdk_root: Path,
    *,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
    jobs: int = 1,
) -> SdkSymbolIndex:
    """Parse an SDK checkout into a symbol index.

    Args:
        sdk_root: Root of the SDK source checkout
        include_patterns: Optional fnmatch patterns for sources to include
        exclude_patterns: Optional fnmatch patterns for sources to exclude
        nested_gitignore: Compose nested .gitignore files
        jobs: Worker threads for per-file parsing; the result does not
            depend on it

    Returns:
        The immutable SdkSymbolIndex.

    Raises:
        IndexBuildError: If ``sdk_root`` is missing, not a directory, or has
            no Kotlin/Java sources.
    """
    if not sdk_root.exists():
        msg = f"SDK root does not exist: {sdk_root}"
        raise IndexBuildError(msg)
    if not sdk_root.is_dir():
        msg = f"SDK root is not a directory: {sdk_root}"
        raise IndexBuildError(msg)

    try:
        files = list(
            find_files(
                sdk_root,
                SDK_SOURCE_EXTENSIONS,
                include_patterns=include_patterns,
                exclude_patterns=exclude_patterns,
                nested_gitignore=nested_gitignore,
            )
        )
    except OSError as exc:
        msg = f"Cannot scan SDK root {sdk_root}: {exc}"
        raise IndexBuildError(msg) from exc

    if not files:
        msg = f"No Kotlin or Java sources found under {sdk_root}"
        raise IndexBuildError(msg)

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            per_file = list(executor.map(lambda path: _parse_file(path, sdk_root), files))
    else:
        per_file = [_parse_file(path, sdk_root) for path in files]

    index = SdkSymbolIndex.from_symbols(
        symbol for file_symbols in per_file for symbol in file_symbols
    )
    logger.debug("Indexed %d symbol(s) from %d file(s)", len(index), len(files))
    return index


__all__ = ["SDK_SOURCE_EXTENSIONS", "IndexBuildError", "SdkSymbolIndex", "build_index"]
