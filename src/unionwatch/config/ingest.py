"""Ingestion defaults for batch and news runs.

Extension fields can be declared locally through ``UNIONWATCH_CUSTOM_FIELDS``
as comma separated ``section.key[:type]`` items, for example
``datosBasicos.afiliados:number,root.fundacion:date``. They apply to every
store backend; remote settings may declare more.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import float_env_var
from .errors import ConfigurationError

DEFAULT_BATCH_COOLDOWN_SECONDS = 2.0
DEFAULT_NEWS_BATCH_LIMIT = 20

CUSTOM_FIELDS_ENV_VAR = "UNIONWATCH_CUSTOM_FIELDS"
CUSTOM_FIELD_SECTIONS = ("datosBasicos", "root", "acciones", "paritarias")
CUSTOM_FIELD_TYPES = ("text", "number", "date", "textarea")


@dataclass(frozen=True, slots=True)
class CustomFieldSetting:
    """One locally declared extension field, before it reaches the registry."""

    section: str
    key: str
    type: str = "text"

    @property
    def label(self) -> str:
        return self.key


@dataclass(frozen=True, slots=True)
class IngestConfig:
    batch_cooldown_seconds: float = DEFAULT_BATCH_COOLDOWN_SECONDS
    news_batch_limit: int = DEFAULT_NEWS_BATCH_LIMIT
    extra_event_categories: tuple[str, ...] = field(default_factory=tuple)
    custom_fields: tuple[CustomFieldSetting, ...] = field(default_factory=tuple)


def _split_categories(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    categories: list[str] = []
    for item in raw.split(","):
        category = item.strip().lower()
        if category and category not in categories:
            categories.append(category)
    return tuple(categories)


def _parse_custom_field(item: str) -> CustomFieldSetting:
    path, _, type_ = item.partition(":")
    section, _, key = path.strip().partition(".")
    type_ = type_.strip().lower() or "text"
    if section not in CUSTOM_FIELD_SECTIONS or not key.strip():
        raise ConfigurationError(
            f"{CUSTOM_FIELDS_ENV_VAR} item {item!r} must look like section.key, "
            f"with section one of {', '.join(CUSTOM_FIELD_SECTIONS)}"
        )
    if type_ not in CUSTOM_FIELD_TYPES:
        raise ConfigurationError(
            f"{CUSTOM_FIELDS_ENV_VAR} item {item!r} has unknown type {type_!r}"
        )
    return CustomFieldSetting(section=section, key=key.strip(), type=type_)


def _split_custom_fields(raw: str | None) -> tuple[CustomFieldSetting, ...]:
    if not raw:
        return ()
    return tuple(_parse_custom_field(item) for item in raw.split(",") if item.strip())


def get_ingest_config() -> IngestConfig:
    return IngestConfig(
        batch_cooldown_seconds=float_env_var(
            "UNIONWATCH_BATCH_COOLDOWN_SECONDS", DEFAULT_BATCH_COOLDOWN_SECONDS
        ),
        extra_event_categories=_split_categories(os.getenv("UNIONWATCH_EVENT_CATEGORIES")),
        custom_fields=_split_custom_fields(os.getenv(CUSTOM_FIELDS_ENV_VAR)),
    )
