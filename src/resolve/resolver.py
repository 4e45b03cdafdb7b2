"""Reference resolution against an SdkSymbolIndex.

Resolution is pure: it reads the immutable index and never touches the
filesystem, so results depend only on the references and the index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.resolution import ResolutionResult, ResolutionStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from index.sdk_index import SdkSymbolIndex
    from models.symbols import SdkSymbol, SymbolReference


def _compatible(
    candidates: tuple[SdkSymbol, ...], reference: SymbolReference
) -> tuple[SdkSymbol, ...]:
    return tuple(symbol for symbol in candidates if symbol.accepts(reference.kind))


def _classify(
    reference: SymbolReference, candidates: tuple[SdkSymbol, ...]
) -> ResolutionResult:
    if not candidates:
        return ResolutionResult(reference=reference, status=ResolutionStatus.UNRESOLVED)

    if len(candidates) > 1:
        return ResolutionResult(
            reference=reference,
            status=ResolutionStatus.AMBIGUOUS_MATCH,
            candidates=candidates,
        )

    symbol = candidates[0]
    status = (
        ResolutionStatus.RESOLVED_BUT_DEPRECATED
        if symbol.deprecated
        else ResolutionStatus.RESOLVED
    )
    return ResolutionResult(reference=reference, status=status, symbol=symbol)


def resolve_reference(
    reference: SymbolReference, index: SdkSymbolIndex
) -> ResolutionResult:
    """Resolve one reference.

    A qualified hint is tried first. When it finds nothing and its owner is a
    type the index knows, the member is reported as unresolved rather than
    matched by bare name elsewhere; that is exactly the drift worth showing.
    Otherwise the bare name decides: none, one, or several (ambiguous, with
    every candidate listed and none picked).
    """
    if reference.qualified_name:
        candidates = _compatible(index.lookup(reference.qualified_name), reference)
        if candidates:
            return _classify(reference, candidates)

        owner = reference.qualified_name.rpartition(".")[0]
        if owner and index.has_type(owner):
            return _classify(reference, ())

    return _classify(reference, _compatible(index.lookup(reference.name), reference))


def resolve(
    refs: Iterable[SymbolReference], index: SdkSymbolIndex
) -> Iterator[ResolutionResult]:
    """Resolve references lazily, one result per reference, in input order."""
    for reference in refs:
        yield resolve_reference(reference, index)


__all__ = ["resolve", "resolve_reference"]
