"""Pydantic models for the Spanish-keyed union document.

The same document shape is stored in the remote database and produced by the
model for full profiles. Extension values travel as extra keys next to the
core ones, so the payload models that can carry them allow extras.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unionwatch.domain.model import ExtractionKind, is_percentage


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class DocumentBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExtensibleModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def extension_values(self) -> dict[str, object]:
        return dict(self.model_extra or {})


class LeadershipPayload(ExtensibleModel):
    nombre: str = ""
    cargo: str = ""

    _normalize_text = field_validator("nombre", "cargo", mode="before")(_none_to_blank)


class ProfilePayload(ExtensibleModel):
    sede_principal: str = Field(default="", alias="sedePrincipal")
    sitio_web: str = Field(default="", alias="sitioWeb")
    logo: str | None = None

    _normalize_text = field_validator("sede_principal", "sitio_web", mode="before")(
        _none_to_blank
    )
    _normalize_logo = field_validator("logo", mode="before")(_blank_to_none)


class EventPayload(ExtensibleModel):
    titulo: str
    fecha: date
    tipo: str | None = None
    lugar: str = ""
    fuente: str = ""
    descripcion: str = ""

    _normalize_text = field_validator("lugar", "fuente", "descripcion", mode="before")(
        _none_to_blank
    )


class AgreementPayload(ExtensibleModel):
    periodo: str = ""
    porcentaje_aumento: str = Field(alias="porcentajeAumento")
    fecha_firma: date | None = Field(default=None, alias="fechaFirma")
    detalle_texto: str = Field(default="", alias="detalleTexto")
    enlace_fuente: str = Field(default="", alias="enlaceFuente")

    _normalize_text = field_validator(
        "periodo", "detalle_texto", "enlace_fuente", mode="before"
    )(_none_to_blank)
    _normalize_signed_on = field_validator("fecha_firma", mode="before")(_blank_to_none)

    @field_validator("porcentaje_aumento", mode="before")
    @classmethod
    def _check_percentage(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            if not is_percentage(value):
                raise ValueError("must be a number followed by '%', e.g. '85%'")
        return value


def _keyed_items(value: object) -> object:
    """Accept a key-addressed map, a list, or nothing for a sub-collection.

    The remote store drops empty maps and turns integer-like keys into arrays
    with holes, and models sometimes answer with a plain list.
    """

    if value is None:
        return {}
    if isinstance(value, list):
        items = cast(list[object], value)
        return {str(index): item for index, item in enumerate(items) if item is not None}
    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, object], value)
        return {key: item for key, item in mapping.items() if item is not None}
    return value


class UnionDocument(ExtensibleModel):
    nombre: str | None = None
    slug: str | None = None
    datos_basicos: ProfilePayload | None = Field(default=None, alias="datosBasicos")
    comision_directiva: list[LeadershipPayload] = Field(
        default_factory=list[LeadershipPayload], alias="comisionDirectiva"
    )
    acciones: dict[str, EventPayload] = Field(default_factory=dict[str, EventPayload])
    paritarias: dict[str, AgreementPayload] = Field(default_factory=dict[str, AgreementPayload])

    _normalize_identity = field_validator("nombre", "slug", mode="before")(_blank_to_none)
    _normalize_collections = field_validator("acciones", "paritarias", mode="before")(
        _keyed_items
    )

    @field_validator("comision_directiva", mode="before")
    @classmethod
    def _drop_empty_members(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, Mapping):
            # sparse arrays come back from the remote store as index-keyed objects
            value = list(cast(Mapping[str, object], value).values())
        if isinstance(value, list):
            return [member for member in cast(list[object], value) if member is not None]
        return value


class UnionMatchPayload(DocumentBaseModel):
    nombre: str = ""
    slug: str = ""

    _normalize_text = field_validator("nombre", "slug", mode="before")(_none_to_blank)


class AnalysisPayload(DocumentBaseModel):
    """One classified source, as answered by link and news analysis."""

    sindicato_match: UnionMatchPayload | None = Field(default=None, alias="sindicatoMatch")
    tipo_detectado: ExtractionKind = Field(alias="tipoDetectado")
    data: object = None
    error_message: str | None = Field(default=None, alias="errorMessage")


class UnionUpdateAction(DocumentBaseModel):
    """Fenced action block emitted by the chat operator."""

    type: str
    slug: str
    field: str
    value: object = None
    explanation: str = ""

    _normalize_explanation = field_validator("explanation", mode="before")(_none_to_blank)
