"""Shared utilities for sdkref-core."""

from __future__ import annotations

from pathlib import Path

# Gradle/Maven source-set roots; the package path starts right after them.
_SOURCE_ROOTS: tuple[tuple[str, ...], ...] = (
    ("src", "main", "kotlin"),
    ("src", "main", "java"),
    ("src", "commonMain", "kotlin"),
    ("src", "androidMain", "kotlin"),
    ("src",),
)


def path_to_package(file_path: str | Path) -> str:
    """Infer a JVM package name from a source file path.

    Used only for files without a ``package`` declaration.

    Args:
        file_path: Relative file path (e.g. "sdk/src/main/kotlin/io/cloudx/CloudX.kt")

    Returns:
        Package name (e.g. "io.cloudx"), or "" when no source root is found.

    Examples:
        >>> path_to_package("sdk/src/main/kotlin/io/cloudx/CloudX.kt")
        'io.cloudx'
        >>> path_to_package("src/io/cloudx/Banner.java")
        'io.cloudx'
        >>> path_to_package(Path("scripts/Foo.kt"))
        ''
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    parts = [part for part in path_str.replace("\\", "/").split("/") if part]
    directories = parts[:-1]

    for source_root in _SOURCE_ROOTS:
        width = len(source_root)
        for index in range(len(directories) - width + 1):
            if tuple(directories[index : index + width]) == source_root:
                return ".".join(directories[index + width :])

    return ""


__all__ = ["path_to_package"]
