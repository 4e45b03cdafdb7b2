"""Parsing utilities for documentation snippets and SDK sources."""

from parse.kotlin_symbols import extract_symbols_kotlin, scan_kotlin_source
from parse.lexical import mask_comments_and_strings
from parse.markdown import iter_snippets
from parse.treesitter_java import extract_symbols_java, scan_java_source

__all__ = [
    "extract_symbols_java",
    "extract_symbols_kotlin",
    "iter_snippets",
    "mask_comments_and_strings",
    "scan_java_source",
    "scan_kotlin_source",
]
