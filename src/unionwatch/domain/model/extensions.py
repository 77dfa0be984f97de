"""Caller-declared extension fields and event categories.

Records have a fixed core schema. Anything beyond it must be declared as a
``CustomField`` for a section; values are coerced to the declared type at the
document boundary. Model output loses undeclared keys there; stored documents
keep them, uninterpreted, next to the record.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from .enums import EventCategory, FieldSection, FieldType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

log = logging.getLogger(__name__)

_KEY_WHITESPACE = re.compile(r"\s+")


class InvalidExtensionValueError(ValueError):
    """Raised when a declared extension value does not match its declared type."""

    def __init__(self, *, section: FieldSection, key: str, value: object, expected: FieldType):
        self.section = section
        self.key = key
        self.value = value
        self.expected = expected
        super().__init__(
            f"Extension field {section.value}.{key} expects {expected.value}, got {value!r}"
        )


def normalize_field_key(value: str) -> str:
    return _KEY_WHITESPACE.sub("_", value.strip().lower())


@dataclass(frozen=True, slots=True)
class CustomField:
    key: str
    label: str
    section: FieldSection
    type: FieldType = FieldType.TEXT

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", normalize_field_key(self.key))
        if not self.key:
            raise ValueError("Custom field key must not be blank")


@dataclass(frozen=True, slots=True)
class FieldRegistry:
    """Declared extension fields, grouped by section."""

    fields: tuple[CustomField, ...] = ()

    def for_section(self, section: FieldSection) -> tuple[CustomField, ...]:
        return tuple(custom for custom in self.fields if custom.section is section)

    def declares(self, section: FieldSection, key: str) -> bool:
        return any(custom.key == key for custom in self.for_section(section))

    def extended(self, fields: Iterable[CustomField]) -> FieldRegistry:
        """Add ``fields`` whose section and key are not declared yet."""

        added = [custom for custom in fields if not self.declares(custom.section, custom.key)]
        return FieldRegistry(fields=(*self.fields, *added)) if added else self

    def coerce(self, section: FieldSection, raw: Mapping[str, object]) -> dict[str, object]:
        """Keep declared keys of ``section`` and coerce them to their declared type."""

        values: dict[str, object] = {}
        for custom in self.for_section(section):
            if custom.key not in raw:
                continue
            value = raw[custom.key]
            if value is None or value == "":
                continue
            values[custom.key] = _coerce_value(custom, value)
        dropped = set(raw) - {custom.key for custom in self.for_section(section)}
        if dropped:
            log.debug("Dropping undeclared %s fields: %s", section.value, sorted(dropped))
        return values


def _coerce_value(custom: CustomField, value: object) -> object:
    coerced = _COERCERS[custom.type](value)
    if coerced is not None:
        return coerced
    raise InvalidExtensionValueError(
        section=custom.section, key=custom.key, value=value, expected=custom.type
    )


def _as_text(value: object) -> str | None:
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        return None
    return str(value)


def _as_number(value: object) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().replace(",", ".")
    try:
        number = float(text)
    except ValueError:
        return None
    if number.is_integer() and "." not in text:
        return int(number)
    return number


def _as_iso_date(value: object) -> str | None:
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


_COERCERS: dict[FieldType, Callable[[object], object | None]] = {
    FieldType.TEXT: _as_text,
    FieldType.TEXTAREA: _as_text,
    FieldType.NUMBER: _as_number,
    FieldType.DATE: _as_iso_date,
}


@dataclass(frozen=True, slots=True)
class EventCategories:
    """The enumerated event categories, extendable through configuration."""

    extra: tuple[str, ...] = field(default_factory=tuple)

    @property
    def allowed(self) -> tuple[str, ...]:
        return (*(category.value for category in EventCategory), *self.extra)

    def resolve(self, value: str | None) -> str:
        """Return ``value`` if it is a known category, otherwise ``otro``."""

        if value is None:
            return EventCategory.OTHER
        normalized = value.strip().lower()
        if normalized in self.allowed:
            return normalized
        log.debug("Unknown event category %r, using %s", value, EventCategory.OTHER.value)
        return EventCategory.OTHER

    @classmethod
    def from_names(cls, names: Iterable[str]) -> EventCategories:
        builtin = {category.value for category in EventCategory}
        extra: list[str] = []
        for name in names:
            normalized = name.strip().lower()
            if normalized and normalized not in builtin and normalized not in extra:
                extra.append(normalized)
        return cls(extra=tuple(extra))
