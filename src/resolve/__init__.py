"""Matching of extracted references against the SDK index."""

from resolve.resolver import resolve, resolve_reference

__all__ = ["resolve", "resolve_reference"]
