"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from unionwatch.adapters.firebase import FirebaseClient, FirebaseSettingsStore, FirebaseUnionStore
from unionwatch.adapters.gemini import GeminiClient, GeminiIntelligence, PromptSet
from unionwatch.adapters.sqlalchemy import SqlAlchemyUnionStore, create_store_engine
from unionwatch.config import (
    IngestConfig,
    get_database_config,
    get_firebase_config,
    get_gemini_config,
    get_ingest_config,
    get_store_backend,
)
from unionwatch.domain import ingestion
from unionwatch.domain.errors import UpstreamError
from unionwatch.domain.model import (
    CustomField,
    EventCategories,
    FieldRegistry,
    FieldSection,
    FieldType,
    ProfileExtraction,
)
from unionwatch.domain.reconciliation import OptimisticUnionView

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from unionwatch.adapters.firebase import AppSettings
    from unionwatch.config.storage import StoreBackend
    from unionwatch.domain.ingestion import AppliedExtraction
    from unionwatch.domain.model import ExtractionResult, Union
    from unionwatch.domain.ports import FieldUpdate, NewsItem, UnionIntelligence, UnionStore
    from unionwatch.domain.reconciliation import BatchProgress, BatchReport

type Closer = Callable[[], Awaitable[None]]
type IntelligenceFactory = Callable[[], UnionIntelligence]

log = getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    """Loaded union view plus the services the entry points need.

    The model-backed intelligence is built on first use, so commands that only
    read or delete records do not need Gemini credentials.
    """

    view: OptimisticUnionView
    intelligence_factory: IntelligenceFactory
    ingest: IngestConfig = field(default_factory=IngestConfig)
    closers: list[Closer] = field(default_factory=list[Closer])
    _intelligence: UnionIntelligence | None = field(default=None, init=False, repr=False)

    @property
    def intelligence(self) -> UnionIntelligence:
        if self._intelligence is None:
            self._intelligence = self.intelligence_factory()
        return self._intelligence

    async def __aenter__(self) -> AppContext:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        while self.closers:
            await self.closers.pop()()


async def open_app(
    *,
    backend: StoreBackend | None = None,
    store: UnionStore | None = None,
    intelligence: UnionIntelligence | None = None,
    ingest: IngestConfig | None = None,
) -> AppContext:
    """Wire configuration and adapters, then load the union view."""

    ingest_config = ingest or get_ingest_config()
    categories = EventCategories.from_names(ingest_config.extra_event_categories)
    registry = _configured_registry(ingest_config)
    closers: list[Closer] = []
    settings: AppSettings | None = None

    if store is None:
        effective_backend = backend or get_store_backend()
        if effective_backend == "firebase":
            firebase = FirebaseClient(get_firebase_config())
            closers.append(firebase.aclose)
            settings = await _fetch_settings(firebase)
            if settings is not None:
                registry = settings.registry.extended(registry.fields)
            store = FirebaseUnionStore(client=firebase, registry=registry, categories=categories)
        else:
            engine = create_store_engine(get_database_config().uri)

            async def dispose_engine() -> None:
                engine.dispose()

            closers.append(dispose_engine)
            store = SqlAlchemyUnionStore.from_engine(
                engine, registry=registry, categories=categories
            )
        log.info("Using %s union store", effective_backend)

    factory = (
        _intelligence_factory(settings, registry, categories, closers)
        if intelligence is None
        else lambda: intelligence
    )
    context = AppContext(
        view=OptimisticUnionView(store),
        intelligence_factory=factory,
        ingest=ingest_config,
        closers=closers,
    )
    try:
        await context.view.load()
    except Exception:
        await context.aclose()
        raise
    return context


def _configured_registry(config: IngestConfig) -> FieldRegistry:
    return FieldRegistry(
        fields=tuple(
            CustomField(
                key=setting.key,
                label=setting.label,
                section=FieldSection(setting.section),
                type=FieldType(setting.type),
            )
            for setting in config.custom_fields
        )
    )


async def _fetch_settings(firebase: FirebaseClient) -> AppSettings | None:
    try:
        return await FirebaseSettingsStore(firebase).fetch()
    except UpstreamError as exc:
        log.warning("Remote application settings unavailable, using local configuration: %s", exc)
        return None


def _intelligence_factory(
    settings: AppSettings | None,
    registry: FieldRegistry,
    categories: EventCategories,
    closers: list[Closer],
) -> IntelligenceFactory:
    def build() -> UnionIntelligence:
        generator = GeminiClient(get_gemini_config(api_key=settings.api_key if settings else None))
        closers.append(generator.aclose)
        return GeminiIntelligence(
            generator=generator,
            prompts=PromptSet().with_overrides(settings.prompts if settings else {}),
            registry=registry,
            categories=categories,
        )

    return build


async def investigate(context: AppContext, name: str, *, save: bool = True) -> AppliedExtraction:
    """Investigate a union by name and merge the profile into the collection."""

    fresh = await context.intelligence.investigate(name)
    applied = ingestion.apply_extraction(
        ProfileExtraction(union=fresh.ref, profile=fresh),
        directory=context.view.directory(),
        known=context.view.by_slug(),
    )
    if save:
        await context.view.save(applied.union)
    log.info(
        "Investigated %s: slug=%s new=%s saved=%s", name, applied.union.slug, applied.is_new, save
    )
    return applied


async def refresh_union(context: AppContext, slug: str) -> Union:
    union = _require_union(context, slug)
    updated = await ingestion.refresh_union(union, context.intelligence)
    await context.view.save(updated)
    return updated


async def refresh_all(
    context: AppContext,
    *,
    cooldown_seconds: float | None = None,
    on_progress: Callable[[BatchProgress], None] | None = None,
    should_continue: Callable[[], bool] | None = None,
) -> BatchReport:
    return await ingestion.refresh_all(
        context.view,
        context.intelligence,
        cooldown_seconds=(
            context.ingest.batch_cooldown_seconds if cooldown_seconds is None else cooldown_seconds
        ),
        on_progress=on_progress,
        should_continue=should_continue,
    )


async def ingest_source(context: AppContext, url: str, *, save: bool = False) -> AppliedExtraction:
    """Analyse a source URL and merge what it reports into the matching union.

    Without ``save`` the merged record is only returned for review.
    """

    directory = context.view.directory()
    result = await context.intelligence.analyze_source(url, directory)
    applied = ingestion.apply_extraction(
        result, directory=directory, known=context.view.by_slug()
    )
    if save:
        await context.view.save(applied.union)
    log.info(
        "Ingested %s into %s: added=%s skipped=%s new=%s saved=%s",
        url,
        applied.union.slug,
        applied.added,
        applied.skipped,
        applied.is_new,
        save,
    )
    return applied


async def ingest_news(context: AppContext, items: Sequence[NewsItem]) -> list[ExtractionResult]:
    batch = list(items)[: context.ingest.news_batch_limit]
    results = await context.intelligence.analyze_news(batch)
    log.info("News analysis produced %s suggestions from %s items", len(results), len(batch))
    return results


async def accept_suggestion(
    context: AppContext, result: ExtractionResult, *, save: bool = True
) -> AppliedExtraction:
    applied = await ingestion.accept_suggestion(
        result, view=context.view, intelligence=context.intelligence
    )
    if save:
        await context.view.save(applied.union)
    return applied


async def apply_agent_update(context: AppContext, update: FieldUpdate) -> Union:
    union = _require_union(context, update.slug)
    updated = ingestion.apply_field_update(union, update)
    await context.view.save(updated)
    log.info("Applied %s update to %s", update.field, update.slug)
    return updated


async def delete_union(context: AppContext, slug: str) -> None:
    _require_union(context, slug)
    await context.view.delete(slug)


def _require_union(context: AppContext, slug: str) -> Union:
    union = context.view.get(slug)
    if union is None:
        raise LookupError(f"No union stored under {slug!r}")
    return union
