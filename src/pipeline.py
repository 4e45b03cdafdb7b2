"""End-to-end check: SDK index, documents, extraction, resolution, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from extract.extractor import extract, load_documents
from index.sdk_index import build_index
from report.generator import find_undocumented, generate, render_json, render_text
from resolve.resolver import resolve

if TYPE_CHECKING:
    from pathlib import Path

    from models.report import CoverageReport
    from report.generator import GroupBy
    from rules.config import CheckerConfig

logger = logging.getLogger(__name__)

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class CheckOutcome:
    report: CoverageReport
    rendered: str


def run_check(
    docs_dir: Path,
    sdk_dir: Path,
    config: CheckerConfig,
    *,
    group_by: GroupBy = "document",
    output_format: OutputFormat = "text",
    show_undocumented: bool | None = None,
) -> CheckOutcome:
    """Run one consistency check and render its report.

    The SDK index is built before any document is read, so an unusable SDK
    root aborts the run without producing a partial report.

    Args:
        docs_dir: Root of the documentation tree
        sdk_dir: Root of the SDK source checkout
        config: Validated checker configuration
        group_by: Report grouping, ``document`` or ``kind``
        output_format: ``text`` or ``json``
        show_undocumented: Compute undocumented SDK symbols; defaults to
            ``config.report_undocumented``

    Returns:
        CheckOutcome with the report and its rendering.

    Raises:
        IndexBuildError: If the SDK index cannot be built.
        FileNotFoundError: If ``docs_dir`` is not a directory.
    """
    index = build_index(
        sdk_dir,
        include_patterns=config.sdk_include,
        exclude_patterns=config.sdk_exclude,
        nested_gitignore=config.nested_gitignore,
        jobs=config.jobs,
    )

    if not docs_dir.is_dir():
        msg = f"Docs directory does not exist: {docs_dir}"
        raise FileNotFoundError(msg)
    documents, warnings = load_documents(docs_dir, config)

    references = extract(
        documents,
        config.languages,
        ignore_symbols=config.ignore_symbols,
        ignore_packages=config.ignore_packages,
        jobs=config.jobs,
    )
    results = list(resolve(references, index))
    logger.debug("Resolved %d reference(s)", len(results))

    if show_undocumented is None:
        show_undocumented = config.report_undocumented
    undocumented = find_undocumented(index, results) if show_undocumented else None

    report = generate(
        results,
        group_by,
        fail_threshold=config.fail_threshold,
        exclude_ambiguous=config.exclude_ambiguous,
        count_low_confidence=config.count_low_confidence,
        warnings=warnings,
        undocumented=undocumented,
    )

    if output_format == "json":
        rendered = render_json(report)
    else:
        rendered = render_text(report, show_undocumented=show_undocumented)
    return CheckOutcome(report=report, rendered=rendered)


__all__ = ["CheckOutcome", "OutputFormat", "run_check"]
