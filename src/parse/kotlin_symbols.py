"""Lexical Kotlin declaration scanner for the SDK index.

Kotlin has no tree-sitter grammar we can pin to stable node names, so the
scanner works on comment/string-masked text. Each brace scope is "flattened"
(nested blocks blanked) so the declaration regex only ever sees declarations
that belong to that scope.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from models.symbols import SdkSymbol
from parse.lexical import (
    line_starts,
    mask_comments_and_strings,
    match_braces,
    offset_to_line_col,
)

if TYPE_CHECKING:
    from pathlib import Path

    from models.symbols import SdkSymbolKind, Visibility

logger = logging.getLogger(__name__)

_PACKAGE_RE = re.compile(r"^[ \t]*package[ \t]+([A-Za-z_][\w.]*)", re.MULTILINE)

_ANNOTATION = r"@[\w.]+(?:\s*\([^()]*(?:\([^()]*\)[^()]*)*\))?"
_MODIFIER = (
    r"(?:public|private|protected|internal|abstract|open|final|sealed|data|enum"
    r"|annotation|inner|value|inline|companion|override|suspend|operator|infix"
    r"|tailrec|external|const|lateinit|expect|actual|fun(?=\s+interface\b))"
)

_DECL_RE = re.compile(
    r"(?:^|(?<=[;{}]))[ \t]*"
    rf"(?P<annotations>(?:{_ANNOTATION}\s*)*)"
    rf"(?P<modifiers>(?:{_MODIFIER}\s+)*)"
    r"(?:"
    r"(?P<type_kw>class|interface|object)\b(?:\s+(?P<type_name>[A-Za-z_]\w*))?"
    r"|fun\s+(?:<(?P<type_params>[^>]*)>\s*)?"
    r"(?:(?P<receiver>[\w.<>?, ]+?)\.)?(?P<fun_name>[A-Za-z_]\w*)\s*\("
    r"|(?:val|var)\s+(?:<[^>]*>\s*)?(?:[\w.<>?]+\.)?(?P<prop_name>[A-Za-z_]\w*)\b"
    r")",
    re.MULTILINE,
)

_DEPRECATED_RE = re.compile(r"@(?:[\w.]+\.)?Deprecated\b")
_CTOR_OPEN_RE = re.compile(
    r"\s*(?:<[^<>{}]*>)?\s*(?:(?:@[\w.]+\s*)*(?:public|private|protected|internal)?\s*constructor\s*)?\("
)
_CTOR_PROPERTY_RE = re.compile(
    rf"(?:^|[,(])\s*(?:{_ANNOTATION}\s*)*(?P<modifiers>(?:\w+\s+)*?)(?:val|var)\s+(?P<name>[A-Za-z_]\w*)"
)
_ENUM_ENTRY_RE = re.compile(r"^(?:@[\w.]+\s*)*(?P<name>[A-Za-z_]\w*)$")
_GROUP_RE = re.compile(r"\([^()]*\)|\{[^{}]*\}")
_GENERIC_ARGS_RE = re.compile(r"<.*>")
_HIDDEN = frozenset({"private", "internal"})


@dataclass(frozen=True)
class _Scope:
    owner: str
    deprecated: bool
    is_enum: bool = False


def _visibility(modifiers: set[str]) -> Visibility | None:
    if modifiers & _HIDDEN:
        return None
    return "protected" if "protected" in modifiers else "public"


def _qualify(owner: str, name: str) -> str:
    return f"{owner}.{name}" if owner else name


class _KotlinScanner:
    """Walks one masked Kotlin file scope by scope."""

    def __init__(self, masked: str, relative_path: str, package: str) -> None:
        self.package = package
        self.masked = masked
        self.relative_path = relative_path
        self.braces = match_braces(masked)
        self.starts = line_starts(masked)
        self.symbols: list[SdkSymbol] = []

    def _line(self, offset: int) -> int:
        return offset_to_line_col(self.starts, offset)[0]

    def _flatten(self, start: int, end: int) -> str:
        """Return ``masked[start:end]`` with nested brace contents blanked."""
        chars = list(self.masked[start:end])
        offset = start
        while offset < end:
            if self.masked[offset] == "{":
                close = min(self.braces.get(offset, end), end)
                for pos in range(offset + 1, close):
                    if chars[pos - start] != "\n":
                        chars[pos - start] = " "
                offset = close + 1
                continue
            offset += 1
        return "".join(chars)

    def _add(
        self,
        name: str,
        kind: SdkSymbolKind,
        scope: _Scope,
        offset: int,
        *,
        deprecated: bool,
        visibility: Visibility,
    ) -> None:
        self.symbols.append(
            SdkSymbol(
                qualified_name=_qualify(scope.owner, name),
                name=name,
                kind=kind,
                path=self.relative_path,
                line=self._line(offset),
                deprecated=deprecated or scope.deprecated,
                visibility=visibility,
            )
        )

    def scan(self, start: int, end: int, scope: _Scope) -> None:
        flat = self._flatten(start, end)
        if scope.is_enum:
            self._scan_enum_entries(flat, start, scope)

        skip_until = 0
        for match in _DECL_RE.finditer(flat):
            if match.start() < skip_until:
                continue
            modifiers = set(match.group("modifiers").split())
            visibility = _visibility(modifiers)
            if visibility is None:
                if match.group("type_kw"):
                    skip_until = _header_extent(flat, match.end())
                continue
            deprecated = bool(_DEPRECATED_RE.search(match.group("annotations")))

            if match.group("type_kw"):
                skip_until = self._handle_type(
                    match, flat, start, scope, modifiers, visibility, deprecated
                )
            elif match.group("fun_name"):
                self._add(
                    match.group("fun_name"),
                    "method",
                    self._function_scope(match, scope),
                    start + match.start("fun_name"),
                    deprecated=deprecated,
                    visibility=visibility,
                )
            elif match.group("prop_name"):
                self._add(
                    match.group("prop_name"),
                    "constant" if "const" in modifiers else "field",
                    scope,
                    start + match.start("prop_name"),
                    deprecated=deprecated,
                    visibility=visibility,
                )

    def _function_scope(self, match: re.Match[str], scope: _Scope) -> _Scope:
        """Return the scope an extension function is reached through.

        ``fun CloudX.showDebugger()`` is called as ``CloudX.showDebugger()``, so
        it is indexed under its receiver type. Receivers that are type
        parameters (``fun <T> T.also()``) leave the function in ``scope``.
        """
        receiver = match.group("receiver")
        if not receiver:
            return scope
        receiver_type = _GENERIC_ARGS_RE.sub("", receiver).replace("?", "").strip()
        type_params = {
            param.split(":")[0].split()[-1]
            for param in (match.group("type_params") or "").split(",")
            if param.strip()
        }
        if not receiver_type or receiver_type in type_params:
            return scope
        if not receiver_type[0].islower():
            receiver_type = _qualify(self.package, receiver_type)
        return _Scope(owner=receiver_type, deprecated=scope.deprecated)

    def _handle_type(
        self,
        match: re.Match[str],
        flat: str,
        base: int,
        scope: _Scope,
        modifiers: set[str],
        visibility: Visibility,
        deprecated: bool,
    ) -> int:
        """Index a type declaration and its body; return the end of its header."""
        keyword = match.group("type_kw")
        name = match.group("type_name")
        header_end = match.end()

        if "companion" in modifiers:
            # Companion members are reached through the enclosing type.
            body_scope = _Scope(owner=scope.owner, deprecated=scope.deprecated or deprecated)
        elif name is None:
            return header_end
        else:
            kind: SdkSymbolKind
            if keyword == "interface":
                kind = "interface"
            elif keyword == "object":
                kind = "object"
            elif "enum" in modifiers:
                kind = "enum"
            else:
                kind = "class"
            self._add(
                name,
                kind,
                scope,
                base + match.start("type_name"),
                deprecated=deprecated,
                visibility=visibility,
            )
            body_scope = _Scope(
                owner=_qualify(scope.owner, name),
                deprecated=scope.deprecated or deprecated,
                is_enum=kind == "enum",
            )
            if keyword == "class":
                header_end = self._scan_primary_constructor(flat, header_end, base, body_scope)

        body_open = _find_body_open(flat, header_end)
        if body_open is None:
            return header_end
        absolute_open = base + body_open
        close = self.braces.get(absolute_open, len(self.masked))
        self.scan(absolute_open + 1, close, body_scope)
        return body_open + 1

    def _scan_primary_constructor(
        self, flat: str, pos: int, base: int, scope: _Scope
    ) -> int:
        """Index ``val``/``var`` constructor parameters; return the header offset after them."""
        ctor = _CTOR_OPEN_RE.match(flat, pos)
        if ctor is None:
            return pos
        open_paren = ctor.end() - 1
        close_paren = _matching_paren(flat, open_paren)
        params = flat[open_paren:close_paren]
        for param in _CTOR_PROPERTY_RE.finditer(params):
            visibility = _visibility(set(param.group("modifiers").split()))
            if visibility is None:
                continue
            self._add(
                param.group("name"),
                "field",
                scope,
                base + open_paren + param.start("name"),
                deprecated=False,
                visibility=visibility,
            )
        return close_paren + 1

    def _scan_enum_entries(self, flat: str, base: int, scope: _Scope) -> None:
        section_end = flat.find(";")
        section = _blank_groups(flat if section_end == -1 else flat[:section_end])
        cursor = 0
        for piece in section.split(","):
            piece_offset = cursor
            cursor += len(piece) + 1
            entry = _ENUM_ENTRY_RE.match(piece.strip())
            if entry is None:
                continue
            name = entry.group("name")
            self._add(
                name,
                "constant",
                scope,
                base + piece_offset + piece.rfind(name),
                deprecated=bool(_DEPRECATED_RE.search(piece)),
                visibility="public",
            )


def _blank_groups(text: str) -> str:
    """Blank parenthesized and braced groups, innermost first, keeping offsets."""
    previous: str | None = None
    while previous != text:
        previous = text
        text = _GROUP_RE.sub(lambda m: " " * len(m.group()), text)
    return text


def _matching_paren(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return len(text)


def _header_extent(flat: str, pos: int) -> int:
    """Return the offset just past a type header that is not indexed."""
    ctor = _CTOR_OPEN_RE.match(flat, pos)
    if ctor is not None:
        pos = _matching_paren(flat, ctor.end() - 1) + 1
    body_open = _find_body_open(flat, pos)
    return pos if body_open is None else body_open + 1


def _find_body_open(flat: str, pos: int) -> int | None:
    """Return the offset of the ``{`` opening a declaration body, if any.

    The header may continue over several lines when a line ends with ``:`` or
    ``,`` or the next line starts with ``:``, ``,``, ``{`` or ``where``.
    """
    depth = 0
    index = pos
    while index < len(flat):
        char = flat[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif depth == 0:
            if char == "{":
                return index
            if char in ";}":
                return None
            if char == "\n":
                before = flat[pos:index].rstrip()
                after = flat[index + 1 :].lstrip()
                if not (
                    before.endswith((":", ","))
                    or after.startswith((":", ",", "{", "where"))
                ):
                    return None
        index += 1
    return None


def package_of(masked: str) -> str | None:
    match = _PACKAGE_RE.search(masked)
    return match.group(1) if match else None


def scan_kotlin_source(
    source: str, relative_path: str, default_package: str = ""
) -> list[SdkSymbol]:
    """Extract exposed declarations from Kotlin source text.

    Args:
        source: Kotlin source text
        relative_path: Path relative to the SDK root (for output)
        default_package: Package used when the file has no ``package`` header

    Returns:
        SdkSymbol objects in source order.
    """
    masked = mask_comments_and_strings(source)
    package = package_of(masked) or default_package
    scanner = _KotlinScanner(masked, relative_path, package)
    scanner.scan(0, len(masked), _Scope(owner=package, deprecated=False))
    return scanner.symbols


def extract_symbols_kotlin(
    file_path: Path,
    relative_path: str,
    default_package: str = "",
) -> list[SdkSymbol]:
    """Extract exposed declarations from a Kotlin file.

    Unreadable files yield no symbols and are logged.
    """
    try:
        source = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable SDK file %s: %s", relative_path, exc)
        return []
    return scan_kotlin_source(source, relative_path, default_package)


__all__ = ["extract_symbols_kotlin", "package_of", "scan_kotlin_source"]
