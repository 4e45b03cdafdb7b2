"""Lexical symbol extraction from fenced documentation snippets.

Extraction never consults the SDK index: it only reports what the snippets
appear to reference, and the resolver decides what that maps to.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from models.documents import Document, DocumentWarning
from models.symbols import SymbolReference
from parse.lexical import line_starts, mask_comments_and_strings, offset_to_line_col
from parse.markdown import iter_snippets
from rules.extraction import DEFAULT_RULES, LANGUAGE_KEYWORDS, SELF_OWNERS
from scan.files import find_files

if TYPE_CHECKING:
    import re
    from collections.abc import Collection, Iterable, Iterator, Sequence
    from pathlib import Path

    from models.documents import CodeSnippet
    from rules.config import CheckerConfig
    from rules.extraction import ExtractionRule

logger = logging.getLogger(__name__)


class DocumentReadError(Exception):
    """Raised when a single document cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def read_document(path: Path, root: Path) -> Document:
    """Load one document as UTF-8 text.

    Raises:
        DocumentReadError: If the file cannot be read or is not UTF-8.
    """
    relative_path = path.relative_to(root).as_posix()
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"not valid UTF-8 ({exc.reason})"
        raise DocumentReadError(relative_path, msg) from exc
    except OSError as exc:
        msg = f"cannot read document ({exc.strerror or exc})"
        raise DocumentReadError(relative_path, msg) from exc
    return Document(path=relative_path, content=content)


def load_documents(
    docs_root: Path, config: CheckerConfig
) -> tuple[list[Document], list[DocumentWarning]]:
    """Load every documentation file under ``docs_root``.

    Unreadable documents do not stop the scan; each one becomes a warning.

    Returns:
        ``(documents, warnings)``, both in relative-path order.
    """
    documents: list[Document] = []
    warnings: list[DocumentWarning] = []
    for path in find_files(
        docs_root,
        config.doc_extensions,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        try:
            documents.append(read_document(path, docs_root))
        except DocumentReadError as exc:
            logger.warning("Skipping document %s: %s", exc.path, exc.reason)
            warnings.append(DocumentWarning(path=exc.path, message=exc.reason))
    logger.debug("Loaded %d document(s) from %s", len(documents), docs_root)
    return documents, warnings


def _in_packages(qualified: str, packages: Collection[str]) -> bool:
    return any(qualified == pkg or qualified.startswith(f"{pkg}.") for pkg in packages)


def _blank_spans(text: str, spans: list[tuple[int, int]]) -> str:
    chars = list(text)
    for start, end in spans:
        for pos in range(start, end):
            if chars[pos] != "\n":
                chars[pos] = " "
    return "".join(chars)


class _SnippetState:
    """Per-snippet bookkeeping shared by all rules."""

    def __init__(self, ignore_symbols: Collection[str]) -> None:
        self.claimed: set[int] = set()
        self.imports: dict[str, str] = {}
        self.ignored: set[str] = set(ignore_symbols)
        # Offset of a type name -> package path written in front of it.
        self.packages: dict[int, str] = {}

    def qualify(self, dotted: str, offset: int | None = None) -> str:
        package = self.packages.get(offset) if offset is not None else None
        if package is not None:
            return f"{package}.{dotted}"
        head, _, rest = dotted.partition(".")
        target = self.imports.get(head)
        if target is None:
            return dotted
        return f"{target}.{rest}" if rest else target


def _reference_from_match(
    match: re.Match[str],
    rule: ExtractionRule,
    state: _SnippetState,
    ignore_packages: Collection[str],
) -> tuple[str | None, str | None] | None:
    """Return ``(owner, qualified_name)`` for a match, or None to drop it."""
    groups = match.groupdict()
    name: str = groups["name"]
    owner: str | None = groups.get("owner")
    dotted: str | None = groups.get("qualified")

    if rule.consumes and dotted:
        local = groups.get("alias") or name
        if _in_packages(dotted, ignore_packages):
            state.ignored.add(local)
            return None
        state.imports[local] = dotted
        return dotted.rsplit(".", 1)[0], dotted

    if name in LANGUAGE_KEYWORDS or name in state.ignored:
        return None
    if owner in SELF_OWNERS:
        owner = None
    if owner is not None and owner in state.ignored:
        return None

    if owner is not None:
        type_offset = match.start("owner")
    elif dotted is not None:
        type_offset = match.start("qualified")
    else:
        type_offset = match.start("name")
    package = state.packages.get(type_offset)
    if package is not None and _in_packages(package, ignore_packages):
        return None

    if dotted and ("." in dotted or package is not None):
        if dotted.split(".", 1)[0] in state.ignored:
            return None
        qualified = state.qualify(dotted, type_offset)
        return qualified.rsplit(".", 1)[0], qualified
    if owner is not None and owner[0].isupper():
        return owner, f"{state.qualify(owner, type_offset)}.{name}"
    if owner is None and rule.kind == "class" and package is not None:
        return None, f"{package}.{name}"
    if owner is None and rule.kind == "class" and name in state.imports:
        return None, state.imports[name]
    return owner, None


def extract_snippet(
    snippet: CodeSnippet,
    *,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
    ignore_symbols: Collection[str] = (),
    ignore_packages: Collection[str] = (),
) -> list[SymbolReference]:
    """Apply the ordered rules to one snippet.

    Returns:
        References in (line, column) order with document coordinates.
    """
    masked = mask_comments_and_strings(snippet.text)
    starts = line_starts(masked)
    state = _SnippetState(ignore_symbols)
    found: list[SymbolReference] = []

    for rule in rules:
        consumed: list[tuple[int, int]] = []
        for match in rule.pattern.finditer(masked):
            if rule.consumes:
                consumed.append(match.span())
            if "package" in rule.pattern.groupindex:
                state.packages[match.end()] = match.group("package").rstrip(".")
            if "name" not in rule.pattern.groupindex:
                continue
            offset = match.start("name")
            if offset in state.claimed:
                continue
            state.claimed.add(offset)
            if rule.kind is None:
                continue

            resolved = _reference_from_match(match, rule, state, ignore_packages)
            if resolved is None:
                continue
            owner, qualified = resolved
            line, column = offset_to_line_col(starts, offset)
            found.append(
                SymbolReference(
                    name=match.group("name"),
                    kind=rule.kind,
                    document=snippet.document,
                    line=snippet.start_line + line - 1,
                    column=column,
                    language=snippet.language,
                    rule=rule.name,
                    owner=owner,
                    qualified_name=qualified,
                )
            )
        if consumed:
            masked = _blank_spans(masked, consumed)

    found.sort(key=lambda ref: (ref.line, ref.column))
    return found


def extract_document(
    document: Document,
    language_filter: Collection[str],
    *,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
    ignore_symbols: Collection[str] = (),
    ignore_packages: Collection[str] = (),
) -> list[SymbolReference]:
    """Extract references from every matching snippet of one document."""
    languages = {tag.lower() for tag in language_filter}
    references: list[SymbolReference] = []
    for snippet in iter_snippets(document):
        if snippet.language not in languages:
            continue
        references.extend(
            extract_snippet(
                snippet,
                rules=rules,
                ignore_symbols=ignore_symbols,
                ignore_packages=ignore_packages,
            )
        )
    return references


def extract(
    documents: Iterable[Document],
    language_filter: Collection[str],
    *,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
    ignore_symbols: Collection[str] = (),
    ignore_packages: Collection[str] = (),
    jobs: int = 1,
) -> Iterator[SymbolReference]:
    """Lazily extract symbol references from documents.

    Args:
        documents: Documents in the order they should be reported
        language_filter: Fence language tags to scan (e.g. ``{"kotlin"}``)
        rules: Ordered extraction rules
        ignore_symbols: Names that are never reported
        ignore_packages: Package prefixes whose imports are not SDK references
        jobs: Worker threads; results keep document order regardless

    Yields:
        SymbolReference objects in document, line, column order.
    """

    def _one(document: Document) -> list[SymbolReference]:
        return extract_document(
            document,
            language_filter,
            rules=rules,
            ignore_symbols=ignore_symbols,
            ignore_packages=ignore_packages,
        )

    if jobs <= 1:
        for document in documents:
            yield from _one(document)
        return

    with ThreadPoolExecutor(max_workers=jobs) as executor:
        for references in executor.map(_one, documents):
            yield from references


__all__ = [
    "DocumentReadError",
    "extract",
    "extract_document",
    "extract_snippet",
    "load_documents",
    "read_document",
]
