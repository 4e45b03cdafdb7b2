"""Lexical helpers shared by the snippet extractor and the Kotlin scanner."""

from __future__ import annotations

from bisect import bisect_right

_TRIPLE_QUOTE = '"""'


def mask_comments_and_strings(text: str) -> str:
    """Blank out comments and string/char literals of C-family source.

    Line comments (``//``), block comments (``/* */``), double-quoted, raw
    triple-quoted and single-quoted literals are replaced by spaces. Newlines
    are kept, so offsets, line numbers and columns of the result match the
    input exactly.
    """
    chars = list(text)
    length = len(text)
    index = 0

    def blank(start: int, end: int) -> None:
        for pos in range(start, min(end, length)):
            if chars[pos] != "\n":
                chars[pos] = " "

    while index < length:
        if text.startswith("//", index):
            end = text.find("\n", index)
            end = length if end == -1 else end
            blank(index, end)
            index = end
            continue

        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            end = length if end == -1 else end + 2
            blank(index, end)
            index = end
            continue

        if text.startswith(_TRIPLE_QUOTE, index):
            end = text.find(_TRIPLE_QUOTE, index + 3)
            end = length if end == -1 else end + 3
            blank(index, end)
            index = end
            continue

        char = text[index]
        if char in ('"', "'"):
            end = _find_closing_quote(text, index + 1, char)
            blank(index, end)
            index = end
            continue

        index += 1

    return "".join(chars)


def _find_closing_quote(text: str, index: int, quote: str) -> int:
    """Return the offset just past the closing quote (or the end of the line)."""
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        if char == "\n":
            return index
        index += 1
    return length


def match_braces(masked: str) -> dict[int, int]:
    """Map the offset of every ``{`` to the offset of its matching ``}``.

    Unclosed braces map to the end of the text; stray closing braces are
    ignored.
    """
    pairs: dict[int, int] = {}
    stack: list[int] = []
    for offset, char in enumerate(masked):
        if char == "{":
            stack.append(offset)
        elif char == "}" and stack:
            pairs[stack.pop()] = offset
    for offset in stack:
        pairs[offset] = len(masked)
    return pairs


def line_starts(text: str) -> list[int]:
    """Return the offset of the first character of every line."""
    starts = [0]
    starts.extend(
        offset + 1 for offset, char in enumerate(text) if char == "\n"
    )
    return starts


def offset_to_line_col(starts: list[int], offset: int) -> tuple[int, int]:
    """Convert an offset to a 1-based ``(line, column)`` pair."""
    line_index = bisect_right(starts, offset) - 1
    return line_index + 1, offset - starts[line_index] + 1


__all__ = [
    "line_starts",
    "mask_comments_and_strings",
    "match_braces",
    "offset_to_line_col",
]
