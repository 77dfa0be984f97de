"""
Union records:
identity, profile snapshot, and the key-addressed event/agreement collections.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final
from uuid import uuid4

from .enums import EventCategory

if TYPE_CHECKING:
    from datetime import date

UNNAMED_UNION: Final[str] = "Sindicato Sin Nombre"
UNKNOWN_SLUG: Final[str] = "sin-id"

_PERCENTAGE_PATTERN = re.compile(r"^\d+(?:[.,]\d+)?%$")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def new_key() -> str:
    return str(uuid4())


def normalize_slug(value: str) -> str:
    """Return a lowercase, URL-safe identifier derived from ``value``."""

    decomposed = unicodedata.normalize("NFKD", value)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _SLUG_SEPARATORS.sub("-", ascii_only.lower()).strip("-")


def is_percentage(value: str) -> bool:
    return bool(_PERCENTAGE_PATTERN.match(value))


@dataclass(frozen=True, slots=True)
class UnionRef:
    """Directory entry: the identity of a union without its records."""

    slug: str
    name: str


@dataclass(frozen=True, slots=True)
class LeadershipMember:
    name: str
    role: str
    unmapped: dict[str, object] = field(default_factory=dict[str, object])


@dataclass(frozen=True, slots=True, kw_only=True)
class Event:
    """A dated union action (strike, assembly, meeting, ...)."""

    title: str
    date: date
    category: str = EventCategory.OTHER
    location: str = ""
    source_url: str = ""
    description: str = ""
    extra: dict[str, object] = field(default_factory=dict[str, object])
    unmapped: dict[str, object] = field(default_factory=dict[str, object])

    def with_source(self, url: str) -> Event:
        return replace(self, source_url=url)


@dataclass(frozen=True, slots=True, kw_only=True)
class Agreement:
    """A negotiated wage settlement."""

    period: str
    increase: str
    signed_on: date | None = None
    detail: str = ""
    source_url: str = ""
    extra: dict[str, object] = field(default_factory=dict[str, object])
    unmapped: dict[str, object] = field(default_factory=dict[str, object])

    def __post_init__(self) -> None:
        if not is_percentage(self.increase):
            raise ValueError(f"Agreement increase must look like '85%', got {self.increase!r}")

    def with_source(self, url: str) -> Agreement:
        return replace(self, source_url=url)


@dataclass(frozen=True, slots=True, kw_only=True)
class Profile:
    """Point-in-time institutional data, superseded on every re-investigation."""

    headquarters: str = ""
    website: str = ""
    logo: str | None = None
    extra: dict[str, object] = field(default_factory=dict[str, object])
    unmapped: dict[str, object] = field(default_factory=dict[str, object])


@dataclass(slots=True, kw_only=True)
class Union:
    """A tracked union.

    ``slug`` is the store key and never changes once the union is persisted.
    Operations in ``domain.reconciliation`` never mutate a ``Union`` in place;
    they return modified copies.

    ``unmapped`` (here and on the record parts) holds stored keys outside the
    core schema and the declared extensions. ``unreadable_events`` and
    ``unreadable_agreements`` hold stored items that no longer validate, under
    their stored keys. None of these are interpreted; they are written back as
    they were loaded.
    """

    slug: str
    name: str
    profile: Profile = field(default_factory=Profile)
    leadership: list[LeadershipMember] = field(default_factory=list[LeadershipMember])
    events: dict[str, Event] = field(default_factory=dict[str, Event])
    agreements: dict[str, Agreement] = field(default_factory=dict[str, Agreement])
    extra: dict[str, object] = field(default_factory=dict[str, object])
    unmapped: dict[str, object] = field(default_factory=dict[str, object])
    unreadable_events: dict[str, object] = field(default_factory=dict[str, object])
    unreadable_agreements: dict[str, object] = field(default_factory=dict[str, object])

    @classmethod
    def shell(cls, ref: UnionRef) -> Union:
        """Return an empty record for a union seen for the first time."""

        return cls(slug=ref.slug, name=ref.name)

    @property
    def ref(self) -> UnionRef:
        return UnionRef(slug=self.slug, name=self.name)

    def copy(self) -> Union:
        # Event/Agreement/Profile/LeadershipMember are frozen; copying containers suffices.
        return Union(
            slug=self.slug,
            name=self.name,
            profile=self.profile,
            leadership=list(self.leadership),
            events=dict(self.events),
            agreements=dict(self.agreements),
            extra=dict(self.extra),
            unmapped=dict(self.unmapped),
            unreadable_events=dict(self.unreadable_events),
            unreadable_agreements=dict(self.unreadable_agreements),
        )
