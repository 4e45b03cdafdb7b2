"""Symbol extraction from documentation snippets."""

from extract.extractor import (
    DocumentReadError,
    extract,
    extract_document,
    extract_snippet,
    load_documents,
    read_document,
)

__all__ = [
    "DocumentReadError",
    "extract",
    "extract_document",
    "extract_snippet",
    "load_documents",
    "read_document",
]
