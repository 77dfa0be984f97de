"""Turning free-text model responses into structured payloads."""

from __future__ import annotations

from .structured import extract_structured, find_structure_span, strip_code_fences
from .templates import placeholders, render_template

__all__ = [
    "extract_structured",
    "find_structure_span",
    "placeholders",
    "render_template",
    "strip_code_fences",
]
