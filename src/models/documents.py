"""Document and snippet models.

Documents are loaded once per scan and never mutated; snippets are derived
from them on demand and are not persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class Document:
    """A unit of instructional text loaded from the docs root."""

    path: str
    content: str


@dataclass(frozen=True)
class CodeSnippet:
    """A fenced code block inside a document.

    ``start_line`` is the 1-based document line of the first content line, so
    snippet-relative line ``n`` maps to document line ``start_line + n - 1``.
    """

    document: str
    language: str
    start_line: int
    text: str


class DocumentWarning(BaseModel):
    """A document that could not be scanned."""

    path: str
    message: str


__all__ = ["CodeSnippet", "Document", "DocumentWarning"]
