"""Coverage report generation and rendering."""

from report.generator import (
    find_undocumented,
    generate,
    percent_half_up,
    render_json,
    render_text,
)

__all__ = [
    "find_undocumented",
    "generate",
    "percent_half_up",
    "render_json",
    "render_text",
]
