from __future__ import annotations

from pathlib import Path

import pytest

from index.sdk_index import IndexBuildError
from models.report import CheckStatus
from pipeline import run_check
from rules.config import CheckerConfig

_FIXTURES = Path(__file__).parent / "fixtures"
_FIXTURE_SDK = _FIXTURES / "mini_sdk"
_FIXTURE_DOCS = _FIXTURES / "mini_docs"


def _write_doc(docs_root: Path, name: str, snippet: str) -> None:
    docs_root.mkdir(parents=True, exist_ok=True)
    (docs_root / name).write_text(
        f"# Guide\n\n```kotlin\n{snippet}\n```\n", encoding="utf-8"
    )


def test_documented_call_resolves_with_full_coverage(tmp_path: Path) -> None:
    docs = tmp_path / "docs"
    _write_doc(
        docs,
        "banner.md",
        'import io.cloudx.sdk.CloudX\n\nval banner = CloudX.createBanner("home")',
    )

    outcome = run_check(docs, _FIXTURE_SDK, CheckerConfig())

    assert outcome.report.status is CheckStatus.CLEAN
    assert outcome.report.coverage_percent == 100.0
    assert [e.symbol for e in outcome.report.resolved] == [
        "io.cloudx.sdk.CloudX",
        "io.cloudx.sdk.CloudX.createBanner",
    ]


def test_missing_sdk_member_fails_at_default_threshold(tmp_path: Path) -> None:
    docs = tmp_path / "docs"
    _write_doc(
        docs,
        "native.md",
        'import io.cloudx.sdk.CloudX\n\nval ad = CloudX.createNative("home")',
    )

    outcome = run_check(docs, _FIXTURE_SDK, CheckerConfig())

    assert outcome.report.status is CheckStatus.FAIL
    assert outcome.report.coverage_percent == 50.0
    assert [e.name for e in outcome.report.unresolved] == ["createNative"]
    assert "createNative" in outcome.rendered


def test_bare_call_matching_two_classes_is_ambiguous(tmp_path: Path) -> None:
    docs = tmp_path / "docs"
    _write_doc(docs, "load.md", "load()")

    outcome = run_check(docs, _FIXTURE_SDK, CheckerConfig())

    assert outcome.report.ambiguous_count == 1
    assert outcome.report.ambiguous[0].candidates == [
        "io.cloudx.sdk.Banner.load",
        "io.cloudx.sdk.Interstitial.load",
    ]
    assert outcome.report.ambiguous[0].low_confidence is True


def test_missing_sdk_root_raises_before_reading_docs(tmp_path: Path) -> None:
    with pytest.raises(IndexBuildError):
        run_check(tmp_path / "no-docs", tmp_path / "no-sdk", CheckerConfig())


def test_missing_docs_dir_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Docs directory does not exist"):
        run_check(tmp_path / "no-docs", _FIXTURE_SDK, CheckerConfig())


def test_fixture_docs_are_clean_and_report_undocumented() -> None:
    config = CheckerConfig(report_undocumented=True)

    outcome = run_check(_FIXTURE_DOCS, _FIXTURE_SDK, config, group_by="kind")

    report = outcome.report
    assert report.status is CheckStatus.CLEAN
    assert report.total_references == 8
    assert list(report.groups) == ["class", "field", "method"]
    assert report.undocumented is not None
    assert "io.cloudx.sdk.Interstitial" in report.undocumented
    assert "io.cloudx.sdk.CloudX" not in report.undocumented
    assert "io.cloudx.sdk.CloudX.createAdView" not in report.undocumented
    assert "Undocumented SDK symbols" in outcome.rendered


def test_repeated_runs_render_identical_json() -> None:
    config = CheckerConfig(jobs=4)

    first = run_check(_FIXTURE_DOCS, _FIXTURE_SDK, config, output_format="json")
    second = run_check(_FIXTURE_DOCS, _FIXTURE_SDK, config, output_format="json")

    assert first.rendered == second.rendered
