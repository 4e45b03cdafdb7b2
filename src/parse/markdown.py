"""Fenced code block discovery for Markdown documents."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from models.documents import CodeSnippet

if TYPE_CHECKING:
    from collections.abc import Iterator

    from models.documents import Document

# Fences nested in list items are commonly indented, so any indentation is
# accepted for both opening and closing fences.
_OPEN_FENCE_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


def _language_tag(info: str) -> str:
    """Return the lower-cased language of a fence info string (``""`` if none)."""
    words = info.strip().split()
    if not words:
        return ""
    tag = words[0].strip("{}").lstrip(".")
    return tag.split(",")[0].lower()


def _is_closing_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
    )


def iter_snippets(document: Document) -> Iterator[CodeSnippet]:
    """Yield every fenced code block of ``document`` in document order.

    An unclosed fence runs to the end of the document. Backtick fences whose
    info string contains a backtick are not fences (they are inline code).
    """
    lines = document.content.splitlines()
    index = 0
    while index < len(lines):
        match = _OPEN_FENCE_RE.match(lines[index])
        if match is None:
            index += 1
            continue

        fence = match.group("fence")
        info = match.group("info")
        if fence[0] == "`" and "`" in info:
            index += 1
            continue

        body_start = index + 1
        end = body_start
        while end < len(lines) and not _is_closing_fence(lines[end], fence):
            end += 1

        yield CodeSnippet(
            document=document.path,
            language=_language_tag(info),
            start_line=body_start + 1,
            text="\n".join(lines[body_start:end]),
        )
        index = end + 1


__all__ = ["iter_snippets"]
