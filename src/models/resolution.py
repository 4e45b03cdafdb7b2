"""Resolution result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from models.symbols import SdkSymbol, SymbolReference


class ResolutionStatus(str, Enum):
    """Outcome of matching one reference against the SDK index."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    RESOLVED_BUT_DEPRECATED = "resolved_but_deprecated"
    AMBIGUOUS_MATCH = "ambiguous_match"

    @property
    def is_resolved(self) -> bool:
        return self in (
            ResolutionStatus.RESOLVED,
            ResolutionStatus.RESOLVED_BUT_DEPRECATED,
        )


class ResolutionResult(BaseModel):
    """Pairs a reference with at most one matching SDK symbol."""

    model_config = ConfigDict(frozen=True)

    reference: SymbolReference
    status: ResolutionStatus
    symbol: SdkSymbol | None = None
    candidates: tuple[SdkSymbol, ...] = Field(default_factory=tuple)

    @property
    def low_confidence(self) -> bool:
        return self.reference.low_confidence


__all__ = ["ResolutionResult", "ResolutionStatus"]
