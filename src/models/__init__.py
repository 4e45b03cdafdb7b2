"""Model namespace for sdkref-core records."""

from models.documents import CodeSnippet, Document, DocumentWarning
from models.report import CheckStatus, CoverageReport, GroupSummary, ReportEntry
from models.resolution import ResolutionResult, ResolutionStatus
from models.symbols import RefKind, SdkSymbol, SdkSymbolKind, SymbolReference

__all__ = [
    "CheckStatus",
    "CodeSnippet",
    "CoverageReport",
    "Document",
    "DocumentWarning",
    "GroupSummary",
    "RefKind",
    "ReportEntry",
    "ResolutionResult",
    "ResolutionStatus",
    "SdkSymbol",
    "SdkSymbolKind",
    "SymbolReference",
]
