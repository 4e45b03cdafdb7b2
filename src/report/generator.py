"""Aggregation of resolution results into a deterministic coverage report."""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Literal

import orjson

from models.report import CheckStatus, CoverageReport, GroupSummary, ReportEntry
from models.resolution import ResolutionStatus
from models.symbols import TYPE_KINDS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from index.sdk_index import SdkSymbolIndex
    from models.documents import DocumentWarning
    from models.resolution import ResolutionResult

GroupBy = Literal["document", "kind"]

_ONE_DECIMAL = Decimal("0.1")


def _exact_percent(numerator: int, denominator: int) -> Decimal:
    if denominator == 0:
        return Decimal(100)
    return Decimal(numerator) * 100 / Decimal(denominator)


def percent_half_up(numerator: int, denominator: int) -> float:
    """Return ``numerator / denominator`` as a percentage, one decimal, half-up.

    An empty denominator means nothing could drift, which is 100.0.
    """
    value = _exact_percent(numerator, denominator)
    return float(value.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _entry(result: ResolutionResult) -> ReportEntry:
    reference = result.reference
    return ReportEntry(
        document=reference.document,
        line=reference.line,
        column=reference.column,
        name=reference.name,
        kind=reference.kind,
        language=reference.language,
        status=result.status.value,
        low_confidence=result.low_confidence,
        owner=reference.owner,
        qualified_name=reference.qualified_name,
        symbol=result.symbol.qualified_name if result.symbol else None,
        candidates=[candidate.qualified_name for candidate in result.candidates],
    )


def _sort_key(entry: ReportEntry) -> tuple[str, int, int, str, str, str]:
    return (entry.document, entry.line, entry.column, entry.name, entry.kind, entry.status)


class _Tally:
    """Running counts for one slice of the results."""

    def __init__(self) -> None:
        self.total = 0
        self.resolved = 0
        self.deprecated = 0
        self.unresolved = 0
        self.ambiguous = 0

    def add(self, status: ResolutionStatus) -> None:
        self.total += 1
        if status.is_resolved:
            self.resolved += 1
        if status is ResolutionStatus.RESOLVED_BUT_DEPRECATED:
            self.deprecated += 1
        elif status is ResolutionStatus.UNRESOLVED:
            self.unresolved += 1
        elif status is ResolutionStatus.AMBIGUOUS_MATCH:
            self.ambiguous += 1

    def _denominator(self, *, exclude_ambiguous: bool) -> int:
        denominator = self.resolved + self.unresolved
        if not exclude_ambiguous:
            denominator += self.ambiguous
        return denominator

    def coverage(self, *, exclude_ambiguous: bool) -> float:
        return percent_half_up(
            self.resolved, self._denominator(exclude_ambiguous=exclude_ambiguous)
        )

    def status(self, fail_threshold: float, *, exclude_ambiguous: bool) -> CheckStatus:
        """Decide the outcome on the unrounded ratio; rounding is for display only."""
        denominator = self._denominator(exclude_ambiguous=exclude_ambiguous)
        if self.unresolved == 0 and self.resolved == denominator:
            return CheckStatus.CLEAN
        exact = _exact_percent(self.resolved, denominator)
        if exact >= Decimal(str(fail_threshold)):
            return CheckStatus.PARTIAL_DRIFT
        return CheckStatus.FAIL

    def summary(self, *, exclude_ambiguous: bool) -> GroupSummary:
        return GroupSummary(
            total=self.total,
            resolved=self.resolved,
            deprecated=self.deprecated,
            unresolved=self.unresolved,
            ambiguous=self.ambiguous,
            coverage_percent=self.coverage(exclude_ambiguous=exclude_ambiguous),
        )


def find_undocumented(
    index: SdkSymbolIndex, results: Iterable[ResolutionResult]
) -> list[str]:
    """List public, non-deprecated SDK types and methods no document resolves to.

    A resolved member also counts as documenting every type that encloses it.
    """
    documented: set[str] = set()
    for result in results:
        if result.symbol is None:
            continue
        parts = result.symbol.qualified_name.split(".")
        documented.update(".".join(parts[:size]) for size in range(1, len(parts) + 1))

    return [
        symbol.qualified_name
        for symbol in index.public_symbols()
        if (symbol.kind in TYPE_KINDS or symbol.kind == "method")
        and not symbol.deprecated
        and symbol.qualified_name not in documented
    ]


def generate(
    results: Iterable[ResolutionResult],
    group_by: GroupBy = "document",
    *,
    fail_threshold: float = 100.0,
    exclude_ambiguous: bool = False,
    count_low_confidence: bool = True,
    warnings: Sequence[DocumentWarning] = (),
    undocumented: Sequence[str] | None = None,
) -> CoverageReport:
    """Build the coverage report for one scan.

    Args:
        results: One result per extracted reference
        group_by: Summarize per ``document`` path or per reference ``kind``
        fail_threshold: Coverage percent below which the status is FAIL
        exclude_ambiguous: Leave ambiguous matches out of the denominator
        count_low_confidence: Include ``kind=unknown`` references in the
            coverage arithmetic (they are listed either way)
        warnings: Per-document problems collected while loading
        undocumented: Precomputed undocumented SDK symbols, if requested

    Returns:
        The CoverageReport; entry lists are sorted by document, line, column.
    """
    overall = _Tally()
    groups: dict[str, _Tally] = defaultdict(_Tally)
    resolved: list[ReportEntry] = []
    unresolved: list[ReportEntry] = []
    ambiguous: list[ReportEntry] = []
    deprecated: list[ReportEntry] = []
    total = 0
    low_confidence = 0

    for result in results:
        total += 1
        entry = _entry(result)
        if result.low_confidence:
            low_confidence += 1

        if result.status.is_resolved:
            resolved.append(entry)
            if result.status is ResolutionStatus.RESOLVED_BUT_DEPRECATED:
                deprecated.append(entry)
        elif result.status is ResolutionStatus.UNRESOLVED:
            unresolved.append(entry)
        else:
            ambiguous.append(entry)

        if count_low_confidence or not result.low_confidence:
            overall.add(result.status)
            key = entry.document if group_by == "document" else entry.kind
            groups[key].add(result.status)

    coverage = overall.coverage(exclude_ambiguous=exclude_ambiguous)

    return CoverageReport(
        status=overall.status(fail_threshold, exclude_ambiguous=exclude_ambiguous),
        coverage_percent=coverage,
        fail_threshold=fail_threshold,
        group_by=group_by,
        total_references=total,
        resolved_count=len(resolved),
        deprecated_count=len(deprecated),
        unresolved_count=len(unresolved),
        ambiguous_count=len(ambiguous),
        low_confidence_count=low_confidence,
        resolved=sorted(resolved, key=_sort_key),
        unresolved=sorted(unresolved, key=_sort_key),
        ambiguous=sorted(ambiguous, key=_sort_key),
        deprecated=sorted(deprecated, key=_sort_key),
        warnings=sorted(warnings, key=lambda warning: (warning.path, warning.message)),
        groups={
            key: groups[key].summary(exclude_ambiguous=exclude_ambiguous)
            for key in sorted(groups)
        },
        undocumented=sorted(undocumented) if undocumented is not None else None,
    )


def _display_name(entry: ReportEntry) -> str:
    if entry.qualified_name:
        return entry.qualified_name
    if entry.owner:
        return f"{entry.owner}.{entry.name}"
    return entry.name


def _entry_line(entry: ReportEntry) -> str:
    line = (
        f"  {entry.document}:{entry.line}:{entry.column}  "
        f"{entry.kind:<8} {_display_name(entry)}"
    )
    if entry.low_confidence:
        line += "  (low-confidence)"
    if entry.candidates:
        line += f"  -> {', '.join(entry.candidates)}"
    elif entry.symbol and entry.status == ResolutionStatus.RESOLVED_BUT_DEPRECATED.value:
        line += f"  -> {entry.symbol}"
    return line


def render_text(report: CoverageReport, *, show_undocumented: bool = False) -> str:
    """Render the human-readable report; identical input gives identical text."""
    lines = [
        f"SDK reference coverage: {report.coverage_percent:.1f}%",
        f"Status: {report.status.value} (fail threshold {report.fail_threshold:.1f}%)",
        (
            f"References: {report.total_references} total, "
            f"{report.resolved_count} resolved, "
            f"{report.deprecated_count} deprecated, "
            f"{report.unresolved_count} unresolved, "
            f"{report.ambiguous_count} ambiguous, "
            f"{report.low_confidence_count} low-confidence"
        ),
    ]

    for title, entries in (
        ("Unresolved", report.unresolved),
        ("Ambiguous", report.ambiguous),
        ("Deprecated but referenced", report.deprecated),
    ):
        if entries:
            lines.append("")
            lines.append(f"{title} ({len(entries)}):")
            lines.extend(_entry_line(entry) for entry in entries)

    if report.warnings:
        lines.append("")
        lines.append(f"Warnings ({len(report.warnings)}):")
        lines.extend(f"  {warning.path}: {warning.message}" for warning in report.warnings)

    if report.groups:
        lines.append("")
        lines.append(f"By {report.group_by}:")
        for key, group in report.groups.items():
            lines.append(
                f"  {key}  {group.resolved}/{group.total} resolved  "
                f"{group.coverage_percent:.1f}%"
            )

    if show_undocumented and report.undocumented is not None:
        lines.append("")
        lines.append(f"Undocumented SDK symbols ({len(report.undocumented)}):")
        lines.extend(f"  {name}" for name in report.undocumented)

    return "\n".join(lines) + "\n"


def render_json(report: CoverageReport) -> str:
    """Render the machine-readable report with camelCase, sorted keys."""
    payload = report.model_dump(mode="json", by_alias=True, exclude_none=True)
    options = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=options).decode("utf-8") + "\n"


__all__ = [
    "GroupBy",
    "find_undocumented",
    "generate",
    "percent_half_up",
    "render_json",
    "render_text",
]
