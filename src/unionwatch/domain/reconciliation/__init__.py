"""Reconciliation core for merging extracted records into the union collection.

Layered flow:
1) match the model-proposed union against the caller's directory snapshot
2) merge extracted events/agreements into the matched record (with dedup)
3) reconcile fresh full profiles with stored ones under the field policy
4) drive many unions through 3) sequentially with cooldown and isolation
5) apply results to the local view optimistically, rolling back on failure
"""

from __future__ import annotations

from .batch import (
    DEFAULT_COOLDOWN_SECONDS,
    BatchFailure,
    BatchPipeline,
    BatchProgress,
    BatchReport,
)
from .matching import MatchResult, directory_of, match_union
from .merge import (
    DuplicateRule,
    MergeResult,
    is_duplicate_event,
    merge_agreement,
    merge_event,
    merge_events,
)
from .reconcile import (
    merge_agreement_map,
    merge_event_sweep,
    reconcile_profile,
    replace_leadership,
)
from .view import OptimisticUnionView

__all__ = [
    "DEFAULT_COOLDOWN_SECONDS",
    "BatchFailure",
    "BatchPipeline",
    "BatchProgress",
    "BatchReport",
    "DuplicateRule",
    "MatchResult",
    "MergeResult",
    "OptimisticUnionView",
    "directory_of",
    "is_duplicate_event",
    "match_union",
    "merge_agreement",
    "merge_agreement_map",
    "merge_event",
    "merge_event_sweep",
    "merge_events",
    "reconcile_profile",
    "replace_leadership",
]
