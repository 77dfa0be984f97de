"""Public interface for the union document adapter."""

from __future__ import annotations

from .schema import AnalysisPayload, UnionDocument, UnionUpdateAction
from .translator import (
    document_from_union,
    extraction_from_payload,
    field_update_from_action,
    load_union_document,
    parse_agreement_map,
    parse_event_list,
    parse_leadership,
    parse_union_document,
    sanitize_document,
)

__all__ = [
    "AnalysisPayload",
    "UnionDocument",
    "UnionUpdateAction",
    "document_from_union",
    "extraction_from_payload",
    "field_update_from_action",
    "load_union_document",
    "parse_agreement_map",
    "parse_event_list",
    "parse_leadership",
    "parse_union_document",
    "sanitize_document",
]
