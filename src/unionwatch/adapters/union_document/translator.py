"""Translate union documents and analysis payloads into domain objects.

Two trust levels exist. Model output is parsed strictly: anything invalid
raises ``MalformedOutputError`` and missing identity raises
``IncompleteEntityError``. Stored documents are loaded leniently: gaps are
filled with placeholders, and whatever cannot be interpreted (invalid items,
undeclared or invalid extension values, unknown event categories) is kept as
found on the loaded record. ``document_from_union`` writes those leftovers back,
so saving a loaded union never loses stored data.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ValidationError

from unionwatch.domain.errors import IncompleteEntityError, MalformedOutputError
from unionwatch.domain.model import (
    UNKNOWN_SLUG,
    UNNAMED_UNION,
    Agreement,
    AgreementExtraction,
    Event,
    EventCategories,
    EventCategory,
    EventExtraction,
    ExtractionFailure,
    ExtractionKind,
    FieldRegistry,
    FieldSection,
    InvalidExtensionValueError,
    LeadershipMember,
    MultiEventExtraction,
    Profile,
    ProfileExtraction,
    Union,
    UnionRef,
    normalize_slug,
)
from unionwatch.domain.ports import FieldUpdate

from .schema import (
    AgreementPayload,
    AnalysisPayload,
    EventPayload,
    LeadershipPayload,
    ProfilePayload,
    UnionDocument,
    UnionUpdateAction,
)

if TYPE_CHECKING:
    from unionwatch.domain.model import ExtractionResult

log = logging.getLogger(__name__)

UNKNOWN_HEADQUARTERS = "Sin datos"
UPDATE_ACTION_TYPE = "UPDATE_UNION"

_PROFILE_WIRE_FIELDS = {
    "sedePrincipal": "headquarters",
    "sitioWeb": "website",
    "logo": "logo",
}
_CORE_DOCUMENT_KEYS = frozenset({"datosBasicos", "acciones", "paritarias", ""})
_SNIPPET_LENGTH = 200

_DEFAULT_REGISTRY = FieldRegistry()
_DEFAULT_CATEGORIES = EventCategories()


def _validate[ModelT: BaseModel](model: type[ModelT], raw: object, what: str) -> ModelT:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        log.debug("Invalid %s payload: %s", what, str(raw)[:_SNIPPET_LENGTH])
        raise MalformedOutputError(
            f"Invalid {what}: {exc.error_count()} validation error(s)",
            snippet=str(raw)[:_SNIPPET_LENGTH],
        ) from exc


def _extensions(
    registry: FieldRegistry,
    section: FieldSection,
    raw: Mapping[str, object],
    *,
    strict: bool,
) -> tuple[dict[str, object], dict[str, object]]:
    """Split extra keys into coerced declared values and uninterpreted leftovers.

    Strict parsing drops undeclared keys and raises on an invalid declared value,
    so its leftovers are always empty.
    """

    if strict:
        try:
            return registry.coerce(section, raw), {}
        except InvalidExtensionValueError as exc:
            raise MalformedOutputError(str(exc)) from exc

    values: dict[str, object] = {}
    unmapped: dict[str, object] = {}
    for key, value in raw.items():
        if not registry.declares(section, key):
            unmapped[key] = value
            continue
        try:
            coerced = registry.coerce(section, {key: value})
        except InvalidExtensionValueError as exc:
            log.warning("Keeping stored value as found: %s", exc)
            coerced = {}
        if coerced:
            values.update(coerced)
        else:
            unmapped[key] = value
    return values, unmapped


# --- Model output -----------------------------------------------------------


def event_from_payload(
    payload: EventPayload,
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
    strict: bool = True,
) -> Event:
    extra, unmapped = _extensions(
        registry, FieldSection.EVENTS, payload.extension_values, strict=strict
    )
    category = categories.resolve(payload.tipo)
    if (
        not strict
        and payload.tipo is not None
        and category == EventCategory.OTHER
        and payload.tipo != EventCategory.OTHER
    ):
        # an unknown stored category reads as "otro" and is written back as stored
        unmapped["tipo"] = payload.tipo
    return Event(
        title=payload.titulo.strip(),
        date=payload.fecha,
        category=category,
        location=payload.lugar,
        source_url=payload.fuente,
        description=payload.descripcion,
        extra=extra,
        unmapped=unmapped,
    )


def agreement_from_payload(
    payload: AgreementPayload,
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    strict: bool = True,
) -> Agreement:
    extra, unmapped = _extensions(
        registry, FieldSection.AGREEMENTS, payload.extension_values, strict=strict
    )
    return Agreement(
        period=payload.periodo,
        increase=payload.porcentaje_aumento,
        signed_on=payload.fecha_firma,
        detail=payload.detalle_texto,
        source_url=payload.enlace_fuente,
        extra=extra,
        unmapped=unmapped,
    )


def parse_event(
    raw: object,
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
) -> Event:
    payload = _validate(EventPayload, raw, "event")
    return event_from_payload(payload, registry=registry, categories=categories)


def parse_agreement(raw: object, *, registry: FieldRegistry = _DEFAULT_REGISTRY) -> Agreement:
    payload = _validate(AgreementPayload, raw, "agreement")
    return agreement_from_payload(payload, registry=registry)


def parse_union_document(
    raw: object,
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
    fallback: UnionRef | None = None,
) -> Union:
    """Parse a model-produced full profile.

    ``fallback`` supplies the identity when the document itself omits it, as
    happens when the profile arrives inside an analysis result.
    """

    document = _validate(UnionDocument, raw, "union profile")
    name = document.nombre or (fallback.name.strip() if fallback else "")
    slug = normalize_slug(document.slug or (fallback.slug if fallback else ""))
    if not name or not slug:
        raise IncompleteEntityError("Generated union profile is missing its name or slug")
    return _union_from_document(
        document, slug=slug, name=name, registry=registry, categories=categories, strict=True
    )


def parse_leadership(raw: object) -> list[LeadershipMember]:
    """Accept a bare member list or a document holding ``comisionDirectiva``."""

    if isinstance(raw, Mapping):
        raw = cast(Mapping[str, object], raw).get("comisionDirectiva", [])
    if not isinstance(raw, list):
        raise MalformedOutputError(
            "Leadership answer is not a list", snippet=str(raw)[:_SNIPPET_LENGTH]
        )
    members = [
        _validate(LeadershipPayload, item, "leadership member")
        for item in cast(list[object], raw)
    ]
    return [_member(payload) for payload in members if payload.nombre.strip()]


def parse_agreement_map(
    raw: object, *, registry: FieldRegistry = _DEFAULT_REGISTRY
) -> dict[str, Agreement]:
    """Accept a key-addressed agreement map, optionally wrapped in ``paritarias``."""

    items = _unwrap_collection(raw, "paritarias")
    return {key: parse_agreement(item, registry=registry) for key, item in items.items()}


def parse_event_list(
    raw: object,
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
) -> list[Event]:
    """Accept a key-addressed event map or list, optionally wrapped in ``acciones``."""

    items = _unwrap_collection(raw, "acciones")
    return [
        parse_event(item, registry=registry, categories=categories) for item in items.values()
    ]


def _unwrap_collection(raw: object, wrapper: str) -> dict[str, object]:
    if isinstance(raw, Mapping) and wrapper in raw:
        raw = cast(Mapping[str, object], raw)[wrapper]
    if raw is None:
        return {}
    if isinstance(raw, list):
        return {str(index): item for index, item in enumerate(cast(list[object], raw))}
    if isinstance(raw, Mapping):
        return dict(cast(Mapping[str, object], raw))
    raise MalformedOutputError(
        f"Expected a {wrapper} collection", snippet=str(raw)[:_SNIPPET_LENGTH]
    )


def extraction_from_payload(
    raw: object,
    *,
    source_url: str | None = None,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
) -> ExtractionResult:
    """Classify one analysis answer into an ``ExtractionResult``.

    When ``source_url`` is given, every extracted event or agreement records it
    as its source, whatever the model claimed.
    """

    payload = _validate(AnalysisPayload, raw, "analysis result")
    ref = _ref_from_match(payload)

    if payload.tipo_detectado is ExtractionKind.ERROR:
        return ExtractionFailure(
            union=ref,
            message=payload.error_message or "The model could not read the source",
        )

    if ref is None:
        raise IncompleteEntityError("Analysis result does not identify a union")
    if payload.data is None:
        raise MalformedOutputError("Analysis result carries no data")

    if payload.tipo_detectado is ExtractionKind.EVENT:
        event = parse_event(payload.data, registry=registry, categories=categories)
        return EventExtraction(union=ref, event=_sourced(event, source_url))

    if payload.tipo_detectado is ExtractionKind.MULTI_EVENT:
        items = payload.data if isinstance(payload.data, list) else [payload.data]
        events = tuple(
            _sourced(parse_event(item, registry=registry, categories=categories), source_url)
            for item in cast(list[object], items)
        )
        return MultiEventExtraction(union=ref, events=events)

    if payload.tipo_detectado is ExtractionKind.AGREEMENT:
        agreement = parse_agreement(payload.data, registry=registry)
        return AgreementExtraction(union=ref, agreement=_sourced(agreement, source_url))

    profile = parse_union_document(
        payload.data, registry=registry, categories=categories, fallback=ref
    )
    return ProfileExtraction(union=ref, profile=profile)


def _ref_from_match(payload: AnalysisPayload) -> UnionRef | None:
    match = payload.sindicato_match
    if match is None:
        return None
    slug = normalize_slug(match.slug)
    name = match.nombre.strip()
    if not slug and not name:
        return None
    return UnionRef(slug=slug, name=name)


def _sourced[ItemT: (Event, Agreement)](item: ItemT, source_url: str | None) -> ItemT:
    if not source_url:
        return item
    return item.with_source(source_url)


def field_update_from_action(raw: object) -> FieldUpdate:
    """Translate the chat operator's action block into a ``FieldUpdate``.

    Wire paths are mapped onto domain paths: ``comisionDirectiva`` becomes
    ``leadership``, ``datosBasicos.sedePrincipal`` becomes
    ``profile.headquarters``, ``nombre`` becomes ``name``.
    """

    action = _validate(UnionUpdateAction, raw, "agent action")
    if action.type != UPDATE_ACTION_TYPE:
        raise MalformedOutputError(f"Unsupported agent action type: {action.type!r}")

    section, _, attribute = action.field.strip().partition(".")
    value = action.value
    if section == "comisionDirectiva" and not attribute:
        field_path = "leadership"
        value = parse_leadership(value)
    elif section == "datosBasicos" and attribute:
        field_path = f"profile.{_PROFILE_WIRE_FIELDS.get(attribute, attribute)}"
    elif section == "nombre" and not attribute:
        field_path = "name"
    elif section == "slug" and not attribute:
        field_path = "slug"
    elif not attribute and section not in _CORE_DOCUMENT_KEYS:
        field_path = section
    else:
        raise MalformedOutputError(f"Unsupported field path: {action.field!r}")

    return FieldUpdate(
        slug=action.slug.strip(),
        field=field_path,
        value=value,
        explanation=action.explanation,
    )


# --- Stored documents -------------------------------------------------------


def sanitize_document(raw: Mapping[str, object]) -> dict[str, object]:
    """Fill the gaps the remote store leaves in a stored document."""

    document = dict(raw)
    for key, default in (("nombre", UNNAMED_UNION), ("slug", UNKNOWN_SLUG)):
        value = document.get(key)
        if not isinstance(value, str) or not value.strip():
            document[key] = default
    if not document.get("datosBasicos"):
        document["datosBasicos"] = {"sedePrincipal": UNKNOWN_HEADQUARTERS, "sitioWeb": ""}
    for key in ("comisionDirectiva", "acciones", "paritarias"):
        if document.get(key) is None:
            document[key] = [] if key == "comisionDirectiva" else {}
    return document


def load_union_document(
    raw: Mapping[str, object],
    *,
    registry: FieldRegistry = _DEFAULT_REGISTRY,
    categories: EventCategories = _DEFAULT_CATEGORIES,
) -> Union:
    """Load a stored document, keeping what no longer validates as found."""

    document = dict(sanitize_document(raw))
    slug = document.get("slug")
    events, unreadable_events = _split_items(
        document.pop("acciones"), EventPayload, what="event", slug=slug
    )
    agreements, unreadable_agreements = _split_items(
        document.pop("paritarias"), AgreementPayload, what="agreement", slug=slug
    )

    try:
        parsed = UnionDocument.model_validate(document)
    except ValidationError as exc:
        raise MalformedOutputError(
            f"Stored union {slug!r} is unreadable: {exc.error_count()} error(s)"
        ) from exc

    parsed.acciones = events
    parsed.paritarias = agreements
    union = _union_from_document(
        parsed,
        slug=parsed.slug or UNKNOWN_SLUG,
        name=parsed.nombre or UNNAMED_UNION,
        registry=registry,
        categories=categories,
        strict=False,
    )
    union.unreadable_events = unreadable_events
    union.unreadable_agreements = unreadable_agreements
    return union


def _split_items[PayloadT: BaseModel](
    raw: object, model: type[PayloadT], *, what: str, slug: object
) -> tuple[dict[str, PayloadT], dict[str, object]]:
    if isinstance(raw, list):
        raw = {str(index): item for index, item in enumerate(cast(list[object], raw))}
    if not isinstance(raw, Mapping):
        # nothing to key the items by; leave the stored record untouched
        raise MalformedOutputError(
            f"Stored union {slug!r} has a {what} collection of type {type(raw).__name__}"
        )

    valid: dict[str, PayloadT] = {}
    unreadable: dict[str, object] = {}
    for key, item in cast(Mapping[str, object], raw).items():
        if item is None:
            continue
        try:
            valid[key] = model.model_validate(item)
        except ValidationError as exc:
            log.warning(
                "Keeping unreadable stored %s %s of %s as found: %s",
                what,
                key,
                slug,
                exc.errors()[0]["msg"],
            )
            unreadable[key] = item
    return valid, unreadable


def _union_from_document(
    document: UnionDocument,
    *,
    slug: str,
    name: str,
    registry: FieldRegistry,
    categories: EventCategories,
    strict: bool,
) -> Union:
    profile_payload = document.datos_basicos or ProfilePayload()
    profile_extra, profile_unmapped = _extensions(
        registry, FieldSection.PROFILE, profile_payload.extension_values, strict=strict
    )
    root_extra, root_unmapped = _extensions(
        registry, FieldSection.ROOT, document.extension_values, strict=strict
    )
    return Union(
        slug=slug,
        name=name.strip(),
        profile=Profile(
            headquarters=profile_payload.sede_principal,
            website=profile_payload.sitio_web,
            logo=profile_payload.logo,
            extra=profile_extra,
            unmapped=profile_unmapped,
        ),
        leadership=[
            _member(member, strict=strict)
            for member in document.comision_directiva
            # stored members are kept even without a name
            if member.nombre.strip() or not strict
        ],
        events={
            key: event_from_payload(
                payload, registry=registry, categories=categories, strict=strict
            )
            for key, payload in document.acciones.items()
        },
        agreements={
            key: agreement_from_payload(payload, registry=registry, strict=strict)
            for key, payload in document.paritarias.items()
        },
        extra=root_extra,
        unmapped=root_unmapped,
    )


def _member(payload: LeadershipPayload, *, strict: bool = True) -> LeadershipMember:
    return LeadershipMember(
        name=payload.nombre.strip(),
        role=payload.cargo.strip(),
        unmapped={} if strict else payload.extension_values,
    )


def _dump(payload: BaseModel) -> dict[str, object]:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


def document_from_union(union: Union) -> dict[str, object]:
    """Serialize ``union`` into its stored document form.

    Leftovers kept at load time are merged back underneath the modelled values,
    except an unknown stored category, which replaces the ``otro`` it was read as.
    """

    document = _dump(
        UnionDocument(
            nombre=union.name,
            slug=union.slug,
            datos_basicos=ProfilePayload(
                sede_principal=union.profile.headquarters,
                sitio_web=union.profile.website,
                logo=union.profile.logo,
                **union.profile.extra,
            ),
            **union.extra,
        )
    )
    document["datosBasicos"] = {
        **union.profile.unmapped,
        **cast(dict[str, object], document["datosBasicos"]),
    }
    document["comisionDirectiva"] = [
        {**member.unmapped, "nombre": member.name, "cargo": member.role}
        for member in union.leadership
    ]
    document["acciones"] = {
        **union.unreadable_events,
        **{key: _event_document(event) for key, event in union.events.items()},
    }
    document["paritarias"] = {
        **union.unreadable_agreements,
        **{key: _agreement_document(agreement) for key, agreement in union.agreements.items()},
    }
    return {**union.unmapped, **document}


def _event_document(event: Event) -> dict[str, object]:
    document = {
        **event.unmapped,
        **_dump(
            EventPayload(
                titulo=event.title,
                fecha=event.date,
                tipo=event.category,
                lugar=event.location,
                fuente=event.source_url,
                descripcion=event.description,
                **event.extra,
            )
        ),
    }
    stored_category = event.unmapped.get("tipo")
    if stored_category is not None and event.category == EventCategory.OTHER:
        document["tipo"] = stored_category
    return document


def _agreement_document(agreement: Agreement) -> dict[str, object]:
    return {
        **agreement.unmapped,
        **_dump(
            AgreementPayload(
                periodo=agreement.period,
                porcentaje_aumento=agreement.increase,
                fecha_firma=agreement.signed_on,
                detalle_texto=agreement.detail,
                enlace_fuente=agreement.source_url,
                **agreement.extra,
            )
        ),
    }
