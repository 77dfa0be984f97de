"""Merge a freshly investigated union profile into the stored record.

The policy is field by field, not a deep merge:

- profile and leadership are snapshots and are replaced wholesale;
- agreements accumulate: fresh keys are unioned into the stored map;
- events are history curated elsewhere and are carried through untouched;
- the stored slug always wins; the name is kept unless explicitly refreshed.

The section helpers apply the same policy to one section at a time, for the
granular "refresh only X" investigations.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from unionwatch.domain.model import new_key

from .merge import DuplicateRule, KeyFactory, MergeResult, merge_events

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from unionwatch.domain.model import Agreement, Event, LeadershipMember, Union

log = logging.getLogger(__name__)


def reconcile_profile(existing: Union, fresh: Union, *, refresh_name: bool = False) -> Union:
    """Return ``existing`` updated from ``fresh`` under the reconciliation policy."""

    if fresh.slug != existing.slug:
        log.debug(
            "Fresh profile proposes slug %r for %s; keeping the stored slug",
            fresh.slug,
            existing.slug,
        )

    merged = existing.copy()
    if refresh_name and fresh.name.strip():
        merged.name = fresh.name.strip()
    # keys the stored profile carried but this application does not model survive
    merged.profile = replace(
        fresh.profile, unmapped={**existing.profile.unmapped, **fresh.profile.unmapped}
    )
    merged.leadership = list(fresh.leadership)
    return _union_agreements(merged, fresh.agreements)


def replace_leadership(existing: Union, leadership: Iterable[LeadershipMember]) -> Union:
    merged = existing.copy()
    merged.leadership = list(leadership)
    return merged


def merge_agreement_map(existing: Union, agreements: Mapping[str, Agreement]) -> Union:
    return _union_agreements(existing.copy(), agreements)


def _union_agreements(merged: Union, agreements: Mapping[str, Agreement]) -> Union:
    merged.agreements = {**merged.agreements, **agreements}
    # a fresh agreement under a stored key supersedes the unreadable stored one
    merged.unreadable_agreements = {
        key: raw for key, raw in merged.unreadable_agreements.items() if key not in agreements
    }
    return merged


def merge_event_sweep(
    existing: Union,
    events: Iterable[Event],
    *,
    key_factory: KeyFactory = new_key,
) -> MergeResult:
    """Add events found by a broad "recent actions" search.

    Sweeps tend to restate known events with different titles, so here an event
    is a duplicate when its date and category match a stored one. Every
    accepted event gets a fresh key; keys proposed by the model are ignored.
    """

    return merge_events(
        existing,
        events,
        rule=DuplicateRule.DATE_CATEGORY,
        key_factory=key_factory,
    )
