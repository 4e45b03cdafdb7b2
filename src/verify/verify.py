"""Determinism verification for sdkref reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pipeline import run_check

if TYPE_CHECKING:
    from pathlib import Path

    from pipeline import CheckOutcome, OutputFormat
    from report.generator import GroupBy
    from rules.config import CheckerConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    first: CheckOutcome
    second: CheckOutcome

    @property
    def first_difference(self) -> int | None:
        """Return the first byte offset at which the two renderings differ."""
        if self.ok:
            return None
        left = self.first.rendered.encode("utf-8")
        right = self.second.rendered.encode("utf-8")
        for offset, (a, b) in enumerate(zip(left, right)):
            if a != b:
                return offset
        return min(len(left), len(right))


def verify_determinism(
    docs_dir: Path,
    sdk_dir: Path,
    config: CheckerConfig,
    output_format: OutputFormat = "text",
    *,
    group_by: GroupBy = "document",
    show_undocumented: bool | None = None,
) -> DeterminismResult:
    """Verify that two runs over unchanged input render identical reports.

    The index and the documents are rebuilt from disk on each run, so the
    comparison covers discovery order, parsing and rendering.

    Args:
        docs_dir: Root of the documentation tree.
        sdk_dir: Root of the SDK source checkout.
        config: Validated checker configuration.
        output_format: Rendering to compare, ``text`` or ``json``.

    Returns:
        DeterminismResult with ok status and both outcomes.

    Raises:
        IndexBuildError: If the SDK index cannot be built.
        FileNotFoundError: If ``docs_dir`` is not a directory.
    """
    runs = [
        run_check(
            docs_dir,
            sdk_dir,
            config,
            group_by=group_by,
            output_format=output_format,
            show_undocumented=show_undocumented,
        )
        for _ in range(2)
    ]
    first, second = runs
    ok = first.rendered.encode("utf-8") == second.rendered.encode("utf-8")
    return DeterminismResult(ok=ok, first=first, second=second)
