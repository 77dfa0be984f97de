"""Domain model for tracked unions."""

from __future__ import annotations

from .enums import EventCategory, ExtractionKind, FieldSection, FieldType
from .extensions import (
    CustomField,
    EventCategories,
    FieldRegistry,
    InvalidExtensionValueError,
    normalize_field_key,
)
from .results import (
    AgreementExtraction,
    EventExtraction,
    ExtractionFailure,
    ExtractionResult,
    MultiEventExtraction,
    ProfileExtraction,
)
from .union import (
    UNKNOWN_SLUG,
    UNNAMED_UNION,
    Agreement,
    Event,
    LeadershipMember,
    Profile,
    Union,
    UnionRef,
    is_percentage,
    new_key,
    normalize_slug,
)

__all__ = [
    "UNKNOWN_SLUG",
    "UNNAMED_UNION",
    "Agreement",
    "AgreementExtraction",
    "CustomField",
    "Event",
    "EventCategories",
    "EventCategory",
    "EventExtraction",
    "ExtractionFailure",
    "ExtractionKind",
    "ExtractionResult",
    "FieldRegistry",
    "FieldSection",
    "FieldType",
    "InvalidExtensionValueError",
    "LeadershipMember",
    "MultiEventExtraction",
    "Profile",
    "ProfileExtraction",
    "Union",
    "UnionRef",
    "is_percentage",
    "new_key",
    "normalize_field_key",
    "normalize_slug",
]
