"""Tree-sitter based declaration extraction for Java SDK sources."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_java import language as get_java_language

from models.symbols import SdkSymbol

if TYPE_CHECKING:
    from pathlib import Path

    from models.symbols import SdkSymbolKind, Visibility

logger = logging.getLogger(__name__)

# Parsers are not safe to share between threads; the index may parse files
# on a worker pool.
_LOCAL = threading.local()

_TYPE_NODES: dict[str, SdkSymbolKind] = {
    "class_declaration": "class",
    "record_declaration": "class",
    "interface_declaration": "interface",
    "annotation_type_declaration": "interface",
    "enum_declaration": "enum",
}
_INTERFACE_KINDS = frozenset({"interface_declaration", "annotation_type_declaration"})
_FIELD_NODES = frozenset({"field_declaration", "constant_declaration"})
_COMMENT_NODES = frozenset({"block_comment", "comment"})


def _get_parser() -> Parser:
    """Initialize and return this thread's Tree-sitter parser for Java."""
    parser = getattr(_LOCAL, "parser", None)
    if parser is None:
        parser = Parser(Language(get_java_language()))
        _LOCAL.parser = parser
    return parser


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8")


def _modifiers(node: Node) -> tuple[set[str], set[str]]:
    """Return ``(keywords, annotation simple names)`` of a declaration."""
    keywords: set[str] = set()
    annotations: set[str] = set()
    for child in node.children:
        if child.type != "modifiers":
            continue
        for modifier in child.children:
            if modifier.type in ("marker_annotation", "annotation"):
                name = _text(modifier.child_by_field_name("name"))
                annotations.add(name.rsplit(".", 1)[-1])
            else:
                keywords.add(modifier.type)
    return keywords, annotations


def _has_deprecated_javadoc(node: Node) -> bool:
    previous = node.prev_sibling
    while previous is not None and previous.type == "line_comment":
        previous = previous.prev_sibling
    return (
        previous is not None
        and previous.type in _COMMENT_NODES
        and "@deprecated" in _text(previous)
    )


def _visibility(keywords: set[str], *, in_interface: bool) -> Visibility | None:
    if "public" in keywords:
        return "public"
    if "protected" in keywords:
        return "protected"
    if in_interface and "private" not in keywords:
        return "public"
    return None


class _JavaWalker:
    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path
        self.symbols: list[SdkSymbol] = []

    def _add(
        self,
        node: Node,
        owner: str,
        name: str,
        kind: SdkSymbolKind,
        *,
        deprecated: bool,
        visibility: Visibility,
    ) -> None:
        self.symbols.append(
            SdkSymbol(
                qualified_name=f"{owner}.{name}" if owner else name,
                name=name,
                kind=kind,
                path=self.relative_path,
                line=node.start_point[0] + 1,
                deprecated=deprecated,
                visibility=visibility,
            )
        )

    def visit_type(
        self,
        node: Node,
        owner: str,
        *,
        in_interface: bool,
        inherited_deprecated: bool,
    ) -> None:
        name = _text(node.child_by_field_name("name"))
        if not name:
            return
        keywords, annotations = _modifiers(node)
        visibility = _visibility(keywords, in_interface=in_interface)
        if visibility is None:
            return
        deprecated = (
            inherited_deprecated
            or "Deprecated" in annotations
            or _has_deprecated_javadoc(node)
        )
        self._add(
            node,
            owner,
            name,
            _TYPE_NODES[node.type],
            deprecated=deprecated,
            visibility=visibility,
        )

        body = node.child_by_field_name("body")
        if body is None:
            return
        qualified = f"{owner}.{name}" if owner else name
        self.visit_body(
            body,
            qualified,
            in_interface=node.type in _INTERFACE_KINDS,
            deprecated=deprecated,
        )

    def visit_body(
        self, body: Node, owner: str, *, in_interface: bool, deprecated: bool
    ) -> None:
        for member in body.named_children:
            if member.type == "enum_constant":
                name = _text(member.child_by_field_name("name"))
                if name:
                    _, annotations = _modifiers(member)
                    self._add(
                        member,
                        owner,
                        name,
                        "constant",
                        deprecated=deprecated or "Deprecated" in annotations,
                        visibility="public",
                    )
            elif member.type == "enum_body_declarations":
                self.visit_body(
                    member, owner, in_interface=in_interface, deprecated=deprecated
                )
            elif member.type in _TYPE_NODES:
                self.visit_type(
                    member,
                    owner,
                    in_interface=in_interface,
                    inherited_deprecated=deprecated,
                )
            elif member.type == "method_declaration":
                self.visit_method(member, owner, in_interface=in_interface, deprecated=deprecated)
            elif member.type in _FIELD_NODES:
                self.visit_field(member, owner, in_interface=in_interface, deprecated=deprecated)

    def visit_method(
        self, node: Node, owner: str, *, in_interface: bool, deprecated: bool
    ) -> None:
        keywords, annotations = _modifiers(node)
        visibility = _visibility(keywords, in_interface=in_interface)
        name = _text(node.child_by_field_name("name"))
        if visibility is None or not name:
            return
        self._add(
            node,
            owner,
            name,
            "method",
            deprecated=deprecated
            or "Deprecated" in annotations
            or _has_deprecated_javadoc(node),
            visibility=visibility,
        )

    def visit_field(
        self, node: Node, owner: str, *, in_interface: bool, deprecated: bool
    ) -> None:
        keywords, annotations = _modifiers(node)
        visibility = _visibility(keywords, in_interface=in_interface)
        if visibility is None:
            return
        is_constant = in_interface or {"static", "final"} <= keywords
        field_deprecated = (
            deprecated or "Deprecated" in annotations or _has_deprecated_javadoc(node)
        )
        for declarator in node.children_by_field_name("declarator"):
            name = _text(declarator.child_by_field_name("name"))
            if name:
                self._add(
                    declarator,
                    owner,
                    name,
                    "constant" if is_constant else "field",
                    deprecated=field_deprecated,
                    visibility=visibility,
                )


def _package_name(root: Node) -> str | None:
    for child in root.named_children:
        if child.type == "package_declaration":
            for part in child.named_children:
                if part.type in ("scoped_identifier", "identifier"):
                    return _text(part)
    return None


def scan_java_source(
    source: bytes, relative_path: str, default_package: str = ""
) -> list[SdkSymbol]:
    """Extract exposed declarations from Java source bytes."""
    tree = _get_parser().parse(source)
    root = tree.root_node
    package = _package_name(root) or default_package

    walker = _JavaWalker(relative_path)
    for child in root.named_children:
        if child.type in _TYPE_NODES:
            walker.visit_type(
                child, package, in_interface=False, inherited_deprecated=False
            )
    return walker.symbols


def extract_symbols_java(
    file_path: Path,
    relative_path: str,
    default_package: str = "",
) -> list[SdkSymbol]:
    """Extract exposed declarations from a Java file using Tree-sitter.

    Args:
        file_path: Absolute path to the Java file
        relative_path: Path relative to the SDK root (for output)
        default_package: Package used when the file has no package declaration

    Returns:
        SdkSymbol objects in source order.
    """
    try:
        source_bytes = file_path.read_bytes()
    except OSError as exc:
        logger.warning("Skipping unreadable SDK file %s: %s", relative_path, exc)
        return []

    return scan_java_source(source_bytes, relative_path, default_package)


__all__ = ["extract_symbols_java", "scan_java_source"]
