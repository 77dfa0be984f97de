"""Port for model-backed investigation and source analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from unionwatch.domain.model import (
        Agreement,
        Event,
        ExtractionResult,
        LeadershipMember,
        Union,
        UnionRef,
    )


@dataclass(frozen=True, slots=True)
class NewsItem:
    title: str
    link: str
    published: str
    source: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class FieldUpdate:
    """A single-field correction requested by the chat operator."""

    slug: str
    field: str
    value: object
    explanation: str = ""


@dataclass(frozen=True, slots=True)
class AgentReply:
    reply: str
    action: FieldUpdate | None = None


@runtime_checkable
class UnionIntelligence(Protocol):
    """Everything the ingestion flows ask of the generative model."""

    async def investigate(self, name: str) -> Union: ...

    async def investigate_leadership(self, name: str) -> list[LeadershipMember]: ...

    async def investigate_agreements(self, name: str) -> dict[str, Agreement]: ...

    async def investigate_events(self, name: str) -> list[Event]: ...

    async def analyze_source(
        self, url: str, directory: Sequence[UnionRef]
    ) -> ExtractionResult: ...

    async def analyze_news(self, items: Sequence[NewsItem]) -> list[ExtractionResult]: ...

    async def search_logos(self, name: str, slug: str) -> list[str]: ...

    async def chat(self, message: str, unions: Sequence[Union]) -> AgentReply: ...
