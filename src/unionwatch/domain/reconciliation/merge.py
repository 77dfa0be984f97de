"""Insert extracted events and agreements into a union's collections.

Events are deduplicated on insert; a duplicate is dropped silently and counted
as skipped, which is a successful outcome. The rules compare exact values
only, so reworded titles or other dates are kept as distinct events.

Agreements are never deduplicated: every insert gets a fresh key, even when an
identical agreement is already stored.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from unionwatch.domain.model import new_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from unionwatch.domain.model import Agreement, Event, Union

type KeyFactory = Callable[[], str]


class DuplicateRule(StrEnum):
    """Which exact fields make two events the same event."""

    DATE_TITLE = "date-title"
    DATE_CATEGORY = "date-category"


_EVENT_KEYS: dict[DuplicateRule, Callable[[Event], Hashable]] = {
    DuplicateRule.DATE_TITLE: lambda event: (event.date, event.title),
    DuplicateRule.DATE_CATEGORY: lambda event: (event.date, event.category),
}


@dataclass(frozen=True, slots=True)
class MergeResult:
    union: Union
    added: int = 0
    skipped: int = 0


def is_duplicate_event(
    union: Union, event: Event, *, rule: DuplicateRule = DuplicateRule.DATE_TITLE
) -> bool:
    key_of = _EVENT_KEYS[rule]
    key = key_of(event)
    return any(key_of(existing) == key for existing in union.events.values())


def merge_event(
    union: Union,
    event: Event,
    *,
    rule: DuplicateRule = DuplicateRule.DATE_TITLE,
    key_factory: KeyFactory = new_key,
) -> MergeResult:
    """Return ``union`` with ``event`` added unless an equivalent event exists."""

    if is_duplicate_event(union, event, rule=rule):
        return MergeResult(union=union.copy(), skipped=1)
    merged = union.copy()
    merged.events[_fresh_key(merged.events, key_factory)] = event
    return MergeResult(union=merged, added=1)


def merge_events(
    union: Union,
    events: Iterable[Event],
    *,
    rule: DuplicateRule = DuplicateRule.DATE_TITLE,
    key_factory: KeyFactory = new_key,
) -> MergeResult:
    """Insert ``events`` one by one, each checked against everything inserted so far."""

    current = union.copy()
    added = 0
    skipped = 0
    for event in events:
        result = merge_event(current, event, rule=rule, key_factory=key_factory)
        current = result.union
        added += result.added
        skipped += result.skipped
    return MergeResult(union=current, added=added, skipped=skipped)


def merge_agreement(
    union: Union,
    agreement: Agreement,
    *,
    key_factory: KeyFactory = new_key,
) -> MergeResult:
    # No dedup rule exists for agreements; re-ingesting a source adds a copy.
    merged = union.copy()
    merged.agreements[_fresh_key(merged.agreements, key_factory)] = agreement
    return MergeResult(union=merged, added=1)


def _fresh_key(collection: Mapping[str, object], key_factory: KeyFactory) -> str:
    key = key_factory()
    while key in collection:
        key = key_factory()
    return key
