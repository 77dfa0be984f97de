"""Resolve a model-proposed union against the caller's directory snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from unionwatch.domain.errors import IncompleteEntityError
from unionwatch.domain.model import Union, UnionRef

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching a candidate against a directory.

    For a match, ``ref`` is the directory's entry (its slug and spelling), never
    the candidate's, so repeated ingestions of the same union do not drift.
    """

    ref: UnionRef
    is_new: bool

    def resolve(self, known: Mapping[str, Union]) -> Union:
        """Return a working copy of the matched union, or a fresh shell for a new one.

        A match whose record is missing from ``known`` raises
        ``IncompleteEntityError``: saving a shell there would overwrite the stored union.
        """

        if self.is_new:
            return Union.shell(self.ref)
        existing = known.get(self.ref.slug)
        if existing is None:
            raise IncompleteEntityError(
                f"Directory entry {self.ref.slug!r} has no loaded record to merge into"
            )
        return existing.copy()


def match_union(candidate: UnionRef, directory: Sequence[UnionRef]) -> MatchResult:
    """Match ``candidate`` by exact slug, then by display-name containment.

    The second rule matches when a directory entry's name appears,
    case-insensitively, inside the candidate's name ("Sindicato X" inside
    "Sindicato X Nacional"). First match in directory order wins.
    """

    slug = candidate.slug.strip()
    name = candidate.name.strip()
    if not slug and not name:
        raise IncompleteEntityError("Union reference has neither slug nor name")

    if slug:
        for entry in directory:
            if entry.slug == slug:
                return MatchResult(ref=entry, is_new=False)

    lowered = name.casefold()
    if lowered:
        for entry in directory:
            entry_name = entry.name.strip().casefold()
            if entry_name and entry_name in lowered:
                log.debug("Matched %r to %s by name containment", name, entry.slug)
                return MatchResult(ref=entry, is_new=False)

    if not slug:
        raise IncompleteEntityError(f"New union {name!r} has no slug")
    return MatchResult(ref=UnionRef(slug=slug, name=name or slug), is_new=True)


def directory_of(unions: Sequence[Union]) -> list[UnionRef]:
    return [union.ref for union in unions]
