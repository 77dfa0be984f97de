"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EventCategory(StrEnum):
    STRIKE = "medida-fuerza"
    ASSEMBLY = "asamblea"
    MEETING = "reunion"
    COMPLAINT = "denuncia"
    MOBILIZATION = "movilizacion"
    OTHER = "otro"


class ExtractionKind(StrEnum):
    """Discriminant of an extraction result, matching the model's ``tipoDetectado``."""

    EVENT = "accion"
    MULTI_EVENT = "multi-accion"
    AGREEMENT = "paritaria"
    PROFILE = "general"
    ERROR = "error"


class FieldSection(StrEnum):
    PROFILE = "datosBasicos"
    ROOT = "root"
    EVENTS = "acciones"
    AGREEMENTS = "paritarias"


class FieldType(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    TEXTAREA = "textarea"
