from __future__ import annotations

import json

import pytest

from index.sdk_index import SdkSymbolIndex
from models.documents import DocumentWarning
from models.report import CheckStatus
from models.resolution import ResolutionResult, ResolutionStatus
from models.symbols import SdkSymbol, SymbolReference
from report.generator import (
    find_undocumented,
    generate,
    percent_half_up,
    render_json,
    render_text,
)


def _symbol(qualified_name: str, kind: str = "method", **overrides: object) -> SdkSymbol:
    data: dict[str, object] = {
        "qualified_name": qualified_name,
        "name": qualified_name.rsplit(".", 1)[-1],
        "kind": kind,
        "path": "Sdk.kt",
        "line": 1,
    }
    data.update(overrides)
    return SdkSymbol.model_validate(data)


def _result(
    name: str,
    status: ResolutionStatus,
    *,
    document: str = "guide.md",
    line: int = 1,
    kind: str = "method",
    symbol: SdkSymbol | None = None,
    candidates: tuple[SdkSymbol, ...] = (),
) -> ResolutionResult:
    reference = SymbolReference.model_validate(
        {
            "name": name,
            "kind": kind,
            "document": document,
            "line": line,
            "column": 1,
            "language": "kotlin",
            "rule": "test",
        }
    )
    return ResolutionResult(
        reference=reference, status=status, symbol=symbol, candidates=candidates
    )


def _resolved(name: str, **kwargs: object) -> ResolutionResult:
    return _result(
        name,
        ResolutionStatus.RESOLVED,
        symbol=_symbol(f"io.cloudx.sdk.CloudX.{name}"),
        **kwargs,  # type: ignore[arg-type]
    )


def _unresolved(name: str, **kwargs: object) -> ResolutionResult:
    return _result(name, ResolutionStatus.UNRESOLVED, **kwargs)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [
        (0, 0, 100.0),
        (1, 3, 33.3),
        (2, 3, 66.7),
        (1, 16, 6.3),
        (1, 8, 12.5),
        (0, 4, 0.0),
    ],
)
def test_percent_rounds_half_up(numerator: int, denominator: int, expected: float) -> None:
    assert percent_half_up(numerator, denominator) == expected


def test_all_resolved_is_clean() -> None:
    report = generate([_resolved("createBanner"), _resolved("initialize", line=2)])

    assert report.status is CheckStatus.CLEAN
    assert report.coverage_percent == 100.0
    assert report.resolved_count == 2


def test_empty_input_is_clean() -> None:
    report = generate([])

    assert report.status is CheckStatus.CLEAN
    assert report.coverage_percent == 100.0
    assert report.total_references == 0


def test_unresolved_below_threshold_fails() -> None:
    report = generate([_resolved("createBanner"), _unresolved("createNative", line=2)])

    assert report.coverage_percent == 50.0
    assert report.status is CheckStatus.FAIL
    assert [entry.name for entry in report.unresolved] == ["createNative"]


def test_unresolved_at_or_above_threshold_is_partial_drift() -> None:
    report = generate(
        [_resolved("createBanner"), _unresolved("createNative", line=2)],
        fail_threshold=50.0,
    )

    assert report.status is CheckStatus.PARTIAL_DRIFT
    assert report.status.exit_code == 0


def test_ambiguous_matches_and_the_denominator() -> None:
    candidates = (_symbol("a.Banner.load"), _symbol("a.Interstitial.load"))
    results = [
        _resolved("createBanner"),
        _result("load", ResolutionStatus.AMBIGUOUS_MATCH, kind="unknown", candidates=candidates),
    ]

    counted = generate(results)
    excluded = generate(results, exclude_ambiguous=True)

    assert counted.coverage_percent == 50.0
    assert counted.ambiguous[0].candidates == ["a.Banner.load", "a.Interstitial.load"]
    assert excluded.coverage_percent == 100.0
    assert excluded.status is CheckStatus.CLEAN


def test_low_confidence_can_be_left_out_of_coverage() -> None:
    results = [_resolved("createBanner"), _unresolved("helper", kind="unknown", line=2)]

    report = generate(results, count_low_confidence=False)

    assert report.coverage_percent == 100.0
    assert report.low_confidence_count == 1
    assert [entry.name for entry in report.unresolved] == ["helper"]


def test_deprecated_counts_as_resolved_and_is_listed() -> None:
    legacy = _symbol("io.cloudx.sdk.CloudX.createAdView", deprecated=True)
    report = generate(
        [_result("createAdView", ResolutionStatus.RESOLVED_BUT_DEPRECATED, symbol=legacy)]
    )

    assert report.coverage_percent == 100.0
    assert report.deprecated_count == 1
    assert report.resolved_count == 1
    assert report.status is CheckStatus.CLEAN


def test_coverage_is_monotonic_in_resolved_references() -> None:
    base = [_resolved("a"), _unresolved("b", line=2), _unresolved("c", line=3)]
    improved = [_resolved("a"), _resolved("b", line=2), _unresolved("c", line=3)]

    assert generate(improved).coverage_percent >= generate(base).coverage_percent


def test_entries_and_groups_are_sorted() -> None:
    results = [
        _unresolved("zeta", document="b.md", line=5),
        _unresolved("alpha", document="a.md", line=9),
        _unresolved("beta", document="a.md", line=2),
    ]

    report = generate(results)

    assert [(e.document, e.line) for e in report.unresolved] == [
        ("a.md", 2),
        ("a.md", 9),
        ("b.md", 5),
    ]
    assert list(report.groups) == ["a.md", "b.md"]
    assert report.groups["a.md"].unresolved == 2


def test_group_by_kind() -> None:
    report = generate(
        [_resolved("createBanner"), _unresolved("Native", kind="class", line=2)],
        "kind",
    )

    assert list(report.groups) == ["class", "method"]
    assert report.groups["class"].coverage_percent == 0.0
    assert report.groups["method"].coverage_percent == 100.0


def test_rendering_is_independent_of_result_order() -> None:
    results = [
        _unresolved("createNative", document="b.md"),
        _resolved("createBanner", document="a.md"),
    ]
    warnings = [DocumentWarning(path="z.md", message="not valid UTF-8")]

    forward = generate(results, warnings=warnings)
    backward = generate(list(reversed(results)), warnings=warnings)

    assert render_text(forward) == render_text(backward)
    assert render_json(forward) == render_json(backward)


def test_render_text_sections() -> None:
    candidates = (_symbol("a.Banner.load"), _symbol("a.Interstitial.load"))
    report = generate(
        [
            _unresolved("createNative", line=3),
            _result(
                "load",
                ResolutionStatus.AMBIGUOUS_MATCH,
                kind="unknown",
                line=4,
                candidates=candidates,
            ),
        ],
        warnings=[DocumentWarning(path="bad.md", message="not valid UTF-8")],
    )

    text = render_text(report)

    assert text.startswith("SDK reference coverage: 0.0%\n")
    assert "Status: fail" in text
    assert "Unresolved (1):" in text
    assert "guide.md:3:1" in text
    assert "-> a.Banner.load, a.Interstitial.load" in text
    assert "(low-confidence)" in text
    assert "bad.md: not valid UTF-8" in text
    assert text.endswith("\n")


def test_render_json_uses_camel_case_keys() -> None:
    report = generate([_resolved("createBanner")])

    payload = json.loads(render_json(report))

    assert payload["coveragePercent"] == 100.0
    assert payload["status"] == "clean"
    assert payload["totalReferences"] == 1
    assert payload["resolved"][0]["lowConfidence"] is False
    assert payload["resolved"][0]["symbol"] == "io.cloudx.sdk.CloudX.createBanner"
    assert "undocumented" not in payload
    assert list(payload) == sorted(payload)


def test_find_undocumented_skips_referenced_and_deprecated() -> None:
    index = SdkSymbolIndex.from_symbols(
        [
            _symbol("io.cloudx.sdk.CloudX", "object"),
            _symbol("io.cloudx.sdk.CloudX.createBanner"),
            _symbol("io.cloudx.sdk.CloudX.createNative"),
            _symbol("io.cloudx.sdk.CloudX.createAdView", deprecated=True),
            _symbol("io.cloudx.sdk.CloudX.VERSION", "constant"),
            _symbol("io.cloudx.sdk.Banner", "class"),
        ]
    )

    undocumented = find_undocumented(index, [_resolved("createBanner")])

    assert undocumented == [
        "io.cloudx.sdk.Banner",
        "io.cloudx.sdk.CloudX.createNative",
    ]

    report = generate([_resolved("createBanner")], undocumented=undocumented)
    assert json.loads(render_json(report))["undocumented"] == undocumented
    assert "Undocumented SDK symbols (2):" in render_text(report, show_undocumented=True)


def test_status_uses_unrounded_coverage() -> None:
    results = [_resolved("createBanner", line=line) for line in range(1, 2000)]
    results.append(_unresolved("createNative", line=2000))

    strict = generate(results, fail_threshold=100.0)
    lenient = generate(results, fail_threshold=99.9)

    assert strict.coverage_percent == 100.0
    assert strict.status is CheckStatus.FAIL
    assert strict.status.exit_code == 1
    assert lenient.status is CheckStatus.PARTIAL_DRIFT
