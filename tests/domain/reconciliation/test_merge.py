from __future__ import annotations

from datetime import date

from unionwatch.domain.model import EventCategory
from unionwatch.domain.reconciliation import (
    DuplicateRule,
    is_duplicate_event,
    merge_agreement,
    merge_event,
    merge_events,
)

from tests.helpers.unions import make_agreement, make_event, make_union, sequential_keys


def test_merging_same_event_twice_keeps_one() -> None:
    union = make_union()
    event = make_event("Paro General", on=date(2025, 3, 1))

    first = merge_event(union, event)
    second = merge_event(first.union, event)

    assert (first.added, first.skipped) == (1, 0)
    assert (second.added, second.skipped) == (0, 1)
    assert len(second.union.events) == 1


def test_distinct_event_is_added() -> None:
    union = merge_event(make_union(), make_event("Paro General")).union

    result = merge_event(union, make_event("Paro General", on=date(2025, 3, 2)))

    assert result.added == 1
    assert len(result.union.events) == 2


def test_reworded_title_is_not_a_duplicate() -> None:
    union = merge_event(make_union(), make_event("Paro General")).union

    assert not is_duplicate_event(union, make_event("Paro general nacional"))


def test_date_category_rule_catches_reworded_titles() -> None:
    union = merge_event(make_union(), make_event("Paro General")).union

    result = merge_event(
        union, make_event("Huelga nacional"), rule=DuplicateRule.DATE_CATEGORY
    )

    assert result.skipped == 1


def test_merge_does_not_mutate_input() -> None:
    union = make_union()

    merge_event(union, make_event())

    assert union.events == {}


def test_merge_events_checks_within_batch() -> None:
    events = [
        make_event("Paro General"),
        make_event("Paro General"),
        make_event("Asamblea", category=EventCategory.ASSEMBLY),
    ]

    result = merge_events(make_union(), events, key_factory=sequential_keys("ev"))

    assert (result.added, result.skipped) == (2, 1)
    assert list(result.union.events) == ["ev-1", "ev-2"]


def test_fresh_key_skips_taken_keys() -> None:
    union = make_union(events={"ev-1": make_event("Viejo", on=date(2024, 1, 1))})

    result = merge_event(union, make_event(), key_factory=sequential_keys("ev"))

    assert set(result.union.events) == {"ev-1", "ev-2"}


def test_agreements_are_never_deduplicated() -> None:
    agreement = make_agreement("12%")

    first = merge_agreement(make_union(), agreement)
    second = merge_agreement(first.union, agreement)

    assert second.added == 1
    assert len(second.union.agreements) == 2
    assert list(second.union.agreements.values()) == [agreement, agreement]
