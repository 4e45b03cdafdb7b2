from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_files

if TYPE_CHECKING:
    from pathlib import Path


def _relative(root: Path, extensions: set[str], **kwargs: object) -> list[str]:
    return [
        path.relative_to(root).as_posix()
        for path in find_files(root, extensions, **kwargs)  # type: ignore[arg-type]
    ]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    docs_root = tmp_path / "docs"
    docs_root.mkdir()
    (docs_root / "guide").mkdir()
    (docs_root / "guide" / "banner.md").write_text("# Banner\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.md").write_text("# Leak\n", encoding="utf-8")

    symlink_dir = docs_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _relative(docs_root, {".md"})

    assert "guide/banner.md" in results
    assert "linked/leak.md" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    docs_root = tmp_path / "docs"
    docs_root.mkdir()
    (docs_root / "guide").mkdir()
    (docs_root / "guide" / "banner.md").write_text("# Banner\n", encoding="utf-8")
    (docs_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text(
        "guide/banner.md\n", encoding="utf-8"
    )

    symlink_gitignore = docs_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(docs_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(docs_root / "guide" / "banner.md")) is False


def test_find_files_is_sorted_and_filters_extensions(tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "z.md").write_text("", encoding="utf-8")
    (tmp_path / "a.MDX").write_text("", encoding="utf-8")
    (tmp_path / "c.txt").write_text("", encoding="utf-8")
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "generated.md").write_text("", encoding="utf-8")

    assert _relative(tmp_path, {".md", ".mdx"}) == ["a.MDX", "b/z.md"]


def test_find_files_respects_gitignore_and_patterns(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("drafts/\n", encoding="utf-8")
    for rel_path in ("drafts/wip.md", "guide/banner.md", "guide/native.md"):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")

    assert _relative(tmp_path, {".md"}) == ["guide/banner.md", "guide/native.md"]
    assert _relative(tmp_path, {".md"}, exclude_patterns=["*native*"]) == [
        "guide/banner.md"
    ]
    assert _relative(tmp_path, {".md"}, include_patterns=["guide/n*"]) == [
        "guide/native.md"
    ]
