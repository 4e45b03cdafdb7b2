"""Coverage report models.

The JSON form of these models uses camelCase keys (``coveragePercent``,
``unresolved`` ...) so CI tooling can consume it directly.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.documents import DocumentWarning


class CheckStatus(str, Enum):
    """Tri-state outcome exposed to the CLI layer."""

    CLEAN = "clean"
    PARTIAL_DRIFT = "partial_drift"
    FAIL = "fail"

    @property
    def exit_code(self) -> int:
        return 1 if self is CheckStatus.FAIL else 0


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportEntry(_CamelModel):
    """One flattened resolution result."""

    document: str
    line: int
    column: int
    name: str
    kind: str
    language: str
    status: str
    low_confidence: bool
    owner: str | None = None
    qualified_name: str | None = None
    symbol: str | None = None
    candidates: list[str] = Field(default_factory=list)


class GroupSummary(_CamelModel):
    """Counts for one document or one symbol kind."""

    total: int
    resolved: int
    deprecated: int
    unresolved: int
    ambiguous: int
    coverage_percent: float


class CoverageReport(_CamelModel):
    """Aggregate of all resolution results of one scan."""

    status: CheckStatus
    coverage_percent: float
    fail_threshold: float
    group_by: str
    total_references: int
    resolved_count: int
    deprecated_count: int
    unresolved_count: int
    ambiguous_count: int
    low_confidence_count: int
    resolved: list[ReportEntry] = Field(default_factory=list)
    unresolved: list[ReportEntry] = Field(default_factory=list)
    ambiguous: list[ReportEntry] = Field(default_factory=list)
    deprecated: list[ReportEntry] = Field(default_factory=list)
    warnings: list[DocumentWarning] = Field(default_factory=list)
    groups: dict[str, GroupSummary] = Field(default_factory=dict)
    undocumented: list[str] | None = None


__all__ = ["CheckStatus", "CoverageReport", "GroupSummary", "ReportEntry"]
