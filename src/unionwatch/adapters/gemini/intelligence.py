"""Model-backed investigation and source analysis.

Each operation renders a prompt template, asks the generator for free text,
locates the JSON structure in the answer and validates it into domain objects.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from unionwatch.adapters.union_document import (
    extraction_from_payload,
    field_update_from_action,
    parse_agreement_map,
    parse_event_list,
    parse_leadership,
    parse_union_document,
)
from unionwatch.domain.errors import IngestionError, NoStructureFoundError, UpstreamError
from unionwatch.domain.extraction import extract_structured, render_template
from unionwatch.domain.model import (
    UNKNOWN_SLUG,
    EventCategories,
    ExtractionFailure,
    FieldRegistry,
)
from unionwatch.domain.ports import (
    AgentReply,
    GenerationOptions,
    TextGenerator,
    UnionIntelligence,
)

from .prompts import PromptSet

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from unionwatch.domain.model import (
        Agreement,
        Event,
        ExtractionResult,
        LeadershipMember,
        Union,
        UnionRef,
    )
    from unionwatch.domain.ports import NewsItem

log = logging.getLogger(__name__)

NEWS_BATCH_LIMIT = 20
SOURCE_ANALYSIS_TEMPERATURE = 0.1
LOGO_SEARCH_TEMPERATURE = 0.2
CHAT_APOLOGY = "Lo siento, hubo un error de conexión con el agente."
CHAT_NO_ANSWER = "No tengo respuesta."
CHAT_ACTION_DONE = "Acción ejecutada."
_UNKNOWN = "N/A"


@dataclass(slots=True)
class GeminiIntelligence:
    generator: TextGenerator
    prompts: PromptSet = field(default_factory=PromptSet)
    registry: FieldRegistry = field(default_factory=FieldRegistry)
    categories: EventCategories = field(default_factory=EventCategories)
    today: Callable[[], date] = date.today
    news_limit: int = NEWS_BATCH_LIMIT

    async def investigate(self, name: str) -> Union:
        variables = {"name": name, "currentYear": self.today().year}
        raw = await self._generate_structured(
            render_template(self.prompts.investigation_request, variables),
            system_instruction=render_template(self.prompts.investigation, variables),
        )
        union = parse_union_document(raw, registry=self.registry, categories=self.categories)
        log.info("Investigated %s as %s", name, union.slug)
        return union

    async def investigate_leadership(self, name: str) -> list[LeadershipMember]:
        raw = await self._generate_structured(
            render_template(self.prompts.leadership, {"name": name})
        )
        return parse_leadership(raw)

    async def investigate_agreements(self, name: str) -> dict[str, Agreement]:
        raw = await self._generate_structured(
            render_template(
                self.prompts.agreements, {"name": name, "currentYear": self.today().year}
            )
        )
        return parse_agreement_map(raw, registry=self.registry)

    async def investigate_events(self, name: str) -> list[Event]:
        raw = await self._generate_structured(render_template(self.prompts.events, {"name": name}))
        return parse_event_list(raw, registry=self.registry, categories=self.categories)

    async def analyze_source(self, url: str, directory: Sequence[UnionRef]) -> ExtractionResult:
        today = self.today()
        context = json.dumps(
            [{"slug": ref.slug, "nombre": ref.name} for ref in directory], ensure_ascii=False
        )
        system_instruction = render_template(
            self.prompts.link_analysis,
            {
                "todayString": today.isoformat(),
                "currentYear": today.year,
                "dbContextString": context,
                "url": url,
            },
        )
        raw = await self._generate_structured(
            render_template(self.prompts.link_analysis_request, {"url": url}),
            system_instruction=system_instruction,
            options=GenerationOptions(temperature=SOURCE_ANALYSIS_TEMPERATURE),
        )
        result = extraction_from_payload(
            raw, source_url=url, registry=self.registry, categories=self.categories
        )
        log.info("Analysed %s as %s", url, result.kind.value)
        return result

    async def analyze_news(self, items: Sequence[NewsItem]) -> list[ExtractionResult]:
        """Classify up to ``news_limit`` news items in a single request.

        Answers that are not a list yield no suggestions; individual entries
        that fail validation or report an error are skipped.
        """

        batch = list(items)[: self.news_limit]
        if not batch:
            return []

        cables = "\n\n".join(
            f"[ID_{index}] Fecha: {item.published} | Título: {item.title} | "
            f"Desc: {item.description} | Link: {item.link}"
            for index, item in enumerate(batch)
        )
        raw = await self._generate_structured(
            render_template(self.prompts.news_analysis_request, {"cables": cables}),
            system_instruction=render_template(
                self.prompts.news_analysis, {"today": self.today().isoformat()}
            ),
            options=GenerationOptions(use_search=False),
        )
        if not isinstance(raw, list):
            log.warning("News analysis answered with %s instead of a list", type(raw).__name__)
            return []

        results: list[ExtractionResult] = []
        for index, entry in enumerate(raw):
            try:
                result = extraction_from_payload(
                    entry, registry=self.registry, categories=self.categories
                )
            except IngestionError as exc:
                log.warning("Skipping news suggestion %s: %s", index, exc)
                continue
            if isinstance(result, ExtractionFailure):
                log.debug("News suggestion %s reported an error: %s", index, result.message)
                continue
            results.append(result)
        return results

    async def search_logos(self, name: str, slug: str) -> list[str]:
        term = slug if slug and slug != UNKNOWN_SLUG else name
        try:
            raw = await self._generate_structured(
                render_template(self.prompts.logo_search, {"name": name, "term": term}),
                options=GenerationOptions(temperature=LOGO_SEARCH_TEMPERATURE),
            )
        except IngestionError as exc:
            log.warning("Logo search for %s failed: %s", name, exc)
            return []
        if not isinstance(raw, list):
            return []
        return [url.strip() for url in raw if isinstance(url, str) and url.strip()]

    async def chat(self, message: str, unions: Sequence[Union]) -> AgentReply:
        """Answer an operator message, possibly proposing a single-field update.

        An update is only recognised inside a fenced ``json`` block; plain
        answers are returned as text.
        """

        summary = json.dumps(
            [
                {
                    "slug": union.slug,
                    "nombre": union.name,
                    "lider": union.leadership[0].name if union.leadership else _UNKNOWN,
                    "sede": union.profile.headquarters or _UNKNOWN,
                }
                for union in unions
            ],
            ensure_ascii=False,
        )
        try:
            text = await self.generator.generate(
                message,
                system_instruction=render_template(self.prompts.chat_agent, {"dbSummary": summary}),
            )
        except UpstreamError as exc:
            log.warning("Chat request failed: %s", exc)
            return AgentReply(reply=CHAT_APOLOGY)

        try:
            update = field_update_from_action(extract_structured(text))
        except NoStructureFoundError:
            return AgentReply(reply=text.strip() or CHAT_NO_ANSWER)
        except IngestionError as exc:
            log.warning("Ignoring unreadable agent action: %s", exc)
            return AgentReply(reply=text.strip())
        return AgentReply(reply=update.explanation or CHAT_ACTION_DONE, action=update)

    async def _generate_structured(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        options: GenerationOptions | None = None,
    ) -> object:
        text = await self.generator.generate(
            prompt, system_instruction=system_instruction, options=options
        )
        return extract_structured(text)


if TYPE_CHECKING:

    def _intelligence_check(generator: TextGenerator) -> UnionIntelligence:
        return GeminiIntelligence(generator=generator)
