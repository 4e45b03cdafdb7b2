"""Symbol models shared by the extractor, the SDK index and the resolver."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

RefKind = Literal["class", "method", "field", "constant", "unknown"]

SdkSymbolKind = Literal[
    "class", "interface", "object", "enum", "method", "field", "constant"
]

Visibility = Literal["public", "protected"]

TYPE_KINDS: frozenset[str] = frozenset({"class", "interface", "object", "enum"})

# Which declared kinds a reference of a given kind may resolve to.
COMPATIBLE_KINDS: dict[str, frozenset[str]] = {
    "class": TYPE_KINDS,
    "method": frozenset({"method"}),
    "field": frozenset({"field", "constant"}),
    "constant": frozenset({"field", "constant"}),
}


class SymbolReference(BaseModel):
    """A candidate API symbol pulled out of a documentation snippet."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: RefKind
    document: str
    line: int
    column: int
    language: str
    rule: str
    owner: str | None = None
    qualified_name: str | None = None

    @property
    def low_confidence(self) -> bool:
        return self.kind == "unknown"

    @property
    def display_name(self) -> str:
        if self.qualified_name:
            return self.qualified_name
        if self.owner:
            return f"{self.owner}.{self.name}"
        return self.name


class SdkSymbol(BaseModel):
    """A declared entity of the SDK's public surface."""

    model_config = ConfigDict(frozen=True)

    qualified_name: str
    name: str
    kind: SdkSymbolKind
    path: str
    line: int
    deprecated: bool = False
    visibility: Visibility = "public"

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    def accepts(self, ref_kind: str) -> bool:
        """Return True when a reference of ``ref_kind`` may resolve to this symbol."""
        compatible = COMPATIBLE_KINDS.get(ref_kind)
        return compatible is None or self.kind in compatible


__all__ = [
    "COMPATIBLE_KINDS",
    "TYPE_KINDS",
    "RefKind",
    "SdkSymbol",
    "SdkSymbolKind",
    "SymbolReference",
    "Visibility",
]
