"""Declarative lexical rules that turn snippet text into symbol references.

Rules are tried in order over the comment/string-masked snippet. Each rule's
regex exposes a ``name`` group and optionally ``owner`` (the identifier before
the dot) and ``qualified`` (a dotted path ending in ``name``). The first rule
that claims the column of a ``name`` group wins; a rule with ``kind=None``
claims its matches without producing references. A ``consumes`` rule blanks
its whole match so later rules never see it. A ``package`` group records the
package path written in front of a type name, so the type keeps its full
qualified name after the path is blanked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from models.symbols import RefKind

_QUALIFIED_TYPE = r"(?P<qualified>(?:[A-Za-z_]\w*\.)*(?P<name>[A-Z]\w*))"
_DOT = r"\s*\??\.\s*"
_TYPE_ARGS = r"(?:<[^<>()]*>)?"


@dataclass(frozen=True)
class ExtractionRule:
    """Maps a lexical pattern to the symbol kind it implies."""

    name: str
    pattern: re.Pattern[str]
    kind: RefKind | None
    consumes: bool = False


def _rule(
    name: str, pattern: str, kind: RefKind | None, *, consumes: bool = False
) -> ExtractionRule:
    return ExtractionRule(
        name=name,
        pattern=re.compile(pattern, re.MULTILINE),
        kind=kind,
        consumes=consumes,
    )


DEFAULT_RULES: tuple[ExtractionRule, ...] = (
    _rule("package_header", r"^[ \t]*package[ \t]+[\w.]+", None, consumes=True),
    _rule("import_wildcard", r"^[ \t]*import[ \t]+[\w.]+\.\*", None, consumes=True),
    _rule(
        "import_type",
        r"^[ \t]*import[ \t]+(?:static[ \t]+)?"
        r"(?P<qualified>(?:[A-Za-z_]\w*\.)+(?P<name>[A-Z]\w*))(?![\w.])"
        r"(?:[ \t]+as[ \t]+(?P<alias>[A-Za-z_]\w*))?",
        "class",
        consumes=True,
    ),
    _rule(
        "import_member",
        r"^[ \t]*import[ \t]+(?:static[ \t]+)?"
        r"(?P<qualified>(?:[A-Za-z_]\w*\.)+(?P<name>[a-z_]\w*))(?![\w.])"
        r"(?:[ \t]+as[ \t]+(?P<alias>[A-Za-z_]\w*))?",
        "unknown",
        consumes=True,
    ),
    _rule(
        "package_prefix",
        r"(?<![\w.])(?!(?:it|this|super)\.)(?P<package>(?:[a-z_]\w*\.)+)(?=[A-Z])",
        None,
        consumes=True,
    ),
    _rule("listener_object", r"\bobject\s*:\s*" + _QUALIFIED_TYPE, "class"),
    _rule("anonymous_class", r"\bnew\s+" + _QUALIFIED_TYPE + r"\s*(?:<[^<>()]*>)?\s*\(", "class"),
    _rule(
        "override_callback",
        r"\boverride\s+(?:suspend\s+)?fun\s+(?P<name>[A-Za-z_]\w*)\s*\(",
        "method",
    ),
    _rule(
        "java_override_callback",
        r"@Override\s+(?:(?:public|protected|final|synchronized)\s+)*"
        r"[\w<>\[\]?,. ]+?\s+(?P<name>[a-z_]\w*)\s*\(",
        "method",
    ),
    _rule(
        "local_function",
        r"\bfun\s+(?:<[^>]*>\s*)?(?:[\w.]+\.)?(?P<name>[A-Za-z_]\w*)\s*\(",
        None,
    ),
    _rule(
        "java_local_method",
        r"\b(?:void|public|private|protected|static)\s+(?:[\w<>\[\]?,. ]+?\s+)?"
        r"(?P<name>[a-z_]\w*)\s*\([^()]*\)\s*(?:throws\s+[\w., ]+)?\{",
        None,
    ),
    _rule(
        "constant",
        r"\b(?P<owner>[A-Z]\w*)" + _DOT + r"(?P<name>[A-Z][A-Z0-9_]+)\b(?!\s*[({])",
        "constant",
    ),
    _rule(
        "nested_type",
        r"\b(?P<owner>[A-Z]\w*)" + _DOT + r"(?P<name>[A-Z]\w*[a-z]\w*)\b",
        "class",
    ),
    _rule(
        "static_call",
        r"\b(?P<owner>[A-Z]\w*)" + _DOT + r"(?P<name>[a-z_]\w*)\s*"
        + _TYPE_ARGS
        + r"\s*[({]",
        "method",
    ),
    _rule(
        "member_call",
        r"\b(?P<owner>[a-z_]\w*)" + _DOT + r"(?P<name>[a-z_]\w*)\s*"
        + _TYPE_ARGS
        + r"\s*[({]",
        "method",
    ),
    _rule("chained_call", r"\)" + _DOT + r"(?P<name>[a-z_]\w*)\s*[({]", "method"),
    _rule(
        "member_access",
        r"\b(?P<owner>[A-Za-z_]\w*)" + _DOT + r"(?P<name>[a-z_]\w*)\b(?!\s*[({])",
        "field",
    ),
    _rule(
        "constructor_call",
        r"(?<![\w.])(?P<name>[A-Z]\w*)\s*(?:<[^<>()]*>)?\s*\(",
        "class",
    ),
    _rule(
        "type_reference",
        r"(?:(?<!:):(?!:)|<|\bis\b|\bas\??)\s*" + _QUALIFIED_TYPE,
        "class",
    ),
    _rule(
        "java_typed_declaration",
        r"(?<![\w.])(?P<name>[A-Z]\w*)(?:<[^<>()]*>)?\s+[a-z_]\w*\s*[=;]",
        "class",
    ),
    _rule("bare_call", r"(?<![\w.$@])(?P<name>[a-z_]\w*)\s*\(", "unknown"),
)

# Host-language words that look like identifiers to the rules above.
LANGUAGE_KEYWORDS: frozenset[str] = frozenset(
    {
        "as",
        "assert",
        "break",
        "catch",
        "class",
        "constructor",
        "continue",
        "do",
        "else",
        "false",
        "finally",
        "for",
        "fun",
        "if",
        "import",
        "in",
        "init",
        "instanceof",
        "interface",
        "is",
        "new",
        "null",
        "object",
        "package",
        "return",
        "super",
        "switch",
        "synchronized",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "val",
        "var",
        "when",
        "while",
    }
)

# Receivers that refer to the current scope rather than a named type or value.
SELF_OWNERS: frozenset[str] = frozenset({"it", "this", "super"})


__all__ = [
    "DEFAULT_RULES",
    "LANGUAGE_KEYWORDS",
    "SELF_OWNERS",
    "ExtractionRule",
]
