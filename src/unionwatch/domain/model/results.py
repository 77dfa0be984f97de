"""Extraction results: what a model response was classified as.

Each variant carries the union reference the model proposed and a payload
whose shape depends on ``kind``. The ``error`` variant is an explicit tag; it
is never inferred from the wording of a response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from .enums import ExtractionKind

if TYPE_CHECKING:
    from .union import Agreement, Event, Union, UnionRef


@dataclass(frozen=True, slots=True, kw_only=True)
class EventExtraction:
    kind: ClassVar[ExtractionKind] = ExtractionKind.EVENT

    union: UnionRef
    event: Event


@dataclass(frozen=True, slots=True, kw_only=True)
class MultiEventExtraction:
    kind: ClassVar[ExtractionKind] = ExtractionKind.MULTI_EVENT

    union: UnionRef
    events: tuple[Event, ...] = field(default_factory=tuple["Event", ...])


@dataclass(frozen=True, slots=True, kw_only=True)
class AgreementExtraction:
    kind: ClassVar[ExtractionKind] = ExtractionKind.AGREEMENT

    union: UnionRef
    agreement: Agreement


@dataclass(frozen=True, slots=True, kw_only=True)
class ProfileExtraction:
    kind: ClassVar[ExtractionKind] = ExtractionKind.PROFILE

    union: UnionRef
    profile: Union


@dataclass(frozen=True, slots=True, kw_only=True)
class ExtractionFailure:
    kind: ClassVar[ExtractionKind] = ExtractionKind.ERROR

    union: UnionRef | None
    message: str


type ExtractionResult = (
    EventExtraction
    | MultiEventExtraction
    | AgreementExtraction
    | ProfileExtraction
    | ExtractionFailure
)
