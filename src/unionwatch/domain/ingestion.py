"""Application services for ingesting model output into the union collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import partial
from typing import TYPE_CHECKING

from unionwatch.domain.errors import IngestionError, ModelReportedError
from unionwatch.domain.model import (
    AgreementExtraction,
    EventExtraction,
    ExtractionFailure,
    LeadershipMember,
    MultiEventExtraction,
    ProfileExtraction,
)
from unionwatch.domain.reconciliation import (
    DEFAULT_COOLDOWN_SECONDS,
    BatchPipeline,
    MergeResult,
    match_union,
    merge_agreement,
    merge_agreement_map,
    merge_event,
    merge_event_sweep,
    merge_events,
    reconcile_profile,
    replace_leadership,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from unionwatch.domain.model import ExtractionResult, Profile, Union, UnionRef
    from unionwatch.domain.ports import FieldUpdate, UnionIntelligence
    from unionwatch.domain.reconciliation import (
        BatchProgress,
        BatchReport,
        OptimisticUnionView,
    )

log = logging.getLogger(__name__)

_PROFILE_ATTRIBUTES = {"headquarters", "website", "logo"}


@dataclass(frozen=True, slots=True)
class AppliedExtraction:
    """A union with an extraction merged in, ready for review and saving."""

    union: Union
    is_new: bool
    added: int = 0
    skipped: int = 0


def apply_extraction(
    result: ExtractionResult,
    *,
    directory: Sequence[UnionRef],
    known: Mapping[str, Union],
) -> AppliedExtraction:
    """Match the extraction's union and merge its payload into that record.

    ``directory`` is the caller's snapshot used for matching; ``known`` maps
    slugs to the loaded records the matched union is copied from.
    """

    if isinstance(result, ExtractionFailure):
        raise ModelReportedError(result.message or "Model could not read the source")

    match = match_union(result.union, directory)
    target = match.resolve(known)

    if isinstance(result, ProfileExtraction):
        if match.is_new:
            return AppliedExtraction(union=result.profile, is_new=True)
        return AppliedExtraction(
            union=reconcile_profile(target, result.profile), is_new=False
        )

    merged = _merge_payload(target, result)
    log.info(
        "Applied %s extraction to %s: added=%s skipped=%s new_union=%s",
        result.kind.value,
        merged.union.slug,
        merged.added,
        merged.skipped,
        match.is_new,
    )
    return AppliedExtraction(
        union=merged.union,
        is_new=match.is_new,
        added=merged.added,
        skipped=merged.skipped,
    )


def _merge_payload(
    target: Union,
    result: EventExtraction | MultiEventExtraction | AgreementExtraction,
) -> MergeResult:
    if isinstance(result, EventExtraction):
        return merge_event(target, result.event)
    if isinstance(result, MultiEventExtraction):
        return merge_events(target, result.events)
    return merge_agreement(target, result.agreement)


async def refresh_union(union: Union, intelligence: UnionIntelligence) -> Union:
    """Re-investigate ``union`` and reconcile the fresh profile into it."""

    fresh = await intelligence.investigate(union.name)
    return reconcile_profile(union, fresh)


async def refresh_leadership(union: Union, intelligence: UnionIntelligence) -> Union:
    return replace_leadership(union, await intelligence.investigate_leadership(union.name))


async def refresh_agreements(union: Union, intelligence: UnionIntelligence) -> Union:
    return merge_agreement_map(union, await intelligence.investigate_agreements(union.name))


async def refresh_events(union: Union, intelligence: UnionIntelligence) -> MergeResult:
    result = merge_event_sweep(union, await intelligence.investigate_events(union.name))
    log.info("Event sweep for %s added %s events", union.slug, result.added)
    return result


async def refresh_all(
    view: OptimisticUnionView,
    intelligence: UnionIntelligence,
    *,
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
    on_progress: Callable[[BatchProgress], None] | None = None,
    should_continue: Callable[[], bool] | None = None,
) -> BatchReport:
    """Re-investigate every union in ``view`` and save each result."""

    pipeline = BatchPipeline(
        reconcile=partial(refresh_union, intelligence=intelligence),
        persist=view.save,
        cooldown_seconds=cooldown_seconds,
        should_continue=should_continue,
    )
    return await pipeline.run(view.unions, on_progress=on_progress)


async def accept_suggestion(
    result: ExtractionResult,
    *,
    view: OptimisticUnionView,
    intelligence: UnionIntelligence,
) -> AppliedExtraction:
    """Turn a news-analysis suggestion into a reviewed record.

    Known unions get the suggestion merged in directly. Unknown unions are
    investigated first so the new record starts with a full profile; if that
    fails, a bare record holding only the suggested item is created instead.
    """

    directory = view.directory()
    known = view.by_slug()
    if isinstance(result, ExtractionFailure) or not match_union(result.union, directory).is_new:
        return apply_extraction(result, directory=directory, known=known)

    try:
        fresh = await intelligence.investigate(result.union.name)
    except IngestionError as exc:
        log.warning("Investigation of new union %s failed: %s", result.union.name, exc)
        return apply_extraction(result, directory=directory, known=known)

    # The investigation may resolve to a union already in the directory.
    base = apply_extraction(
        ProfileExtraction(union=fresh.ref, profile=fresh), directory=directory, known=known
    )
    if isinstance(result, ProfileExtraction):
        return base
    merged = _merge_payload(base.union, result)
    return AppliedExtraction(
        union=merged.union,
        is_new=base.is_new,
        added=merged.added,
        skipped=merged.skipped,
    )


def apply_field_update(union: Union, update: FieldUpdate) -> Union:
    """Apply a single-field correction.

    Supported fields are ``leadership``, ``name``, ``profile.<attribute>`` and
    root extension keys. The slug is the store key and cannot be changed.
    """

    updated = union.copy()
    section, _, attribute = update.field.partition(".")

    if update.field == "slug":
        raise ValueError("The slug of a stored union cannot be changed")
    if update.field == "leadership":
        if not isinstance(update.value, list) or not all(
            isinstance(member, LeadershipMember) for member in update.value
        ):
            raise TypeError("leadership updates require a list of LeadershipMember")
        updated.leadership = list(update.value)
    elif update.field == "name":
        updated.name = str(update.value)
    elif section == "profile" and attribute:
        updated.profile = _update_profile(updated, attribute, update.value)
    elif section == "profile" or not update.field:
        raise ValueError(f"Unsupported field path: {update.field!r}")
    else:
        updated.extra[update.field] = update.value
        updated.unmapped.pop(update.field, None)
    return updated


def _update_profile(union: Union, attribute: str, value: object) -> Profile:
    profile = union.profile
    if attribute == "logo":
        return replace(profile, logo=None if value is None else str(value))
    if attribute in _PROFILE_ATTRIBUTES:
        return replace(profile, **{attribute: "" if value is None else str(value)})
    return replace(
        profile,
        extra={**profile.extra, attribute: value},
        unmapped={key: raw for key, raw in profile.unmapped.items() if key != attribute},
    )
