"""Local view of the union collection with optimistic writes.

Changes are applied to the local view before the remote write completes. If
the write fails the local change is discarded and the view is reloaded from
the store, so local and remote never stay inconsistent. The failure is then
re-raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from unionwatch.domain.model import Union, UnionRef

if TYPE_CHECKING:
    from unionwatch.domain.ports import UnionStore

log = logging.getLogger(__name__)


@dataclass(slots=True)
class OptimisticUnionView:
    store: UnionStore
    _unions: list[Union] = field(default_factory=list[Union], init=False)

    @property
    def unions(self) -> tuple[Union, ...]:
        return tuple(self._unions)

    def directory(self) -> list[UnionRef]:
        return [union.ref for union in self._unions]

    def by_slug(self) -> dict[str, Union]:
        return {union.slug: union for union in self._unions}

    def get(self, slug: str) -> Union | None:
        for union in self._unions:
            if union.slug == slug:
                return union
        return None

    async def load(self) -> tuple[Union, ...]:
        """Replace the local view with the store's authoritative state."""

        self._unions = list(await self.store.get_all_unions())
        log.info("Loaded %s unions from store", len(self._unions))
        return self.unions

    async def save(self, union: Union) -> None:
        snapshot = list(self._unions)
        self._upsert(union)
        try:
            await self.store.put_union(union)
        except Exception:
            log.exception("Saving %s failed; discarding local change", union.slug)
            self._unions = snapshot
            await self._reload_after_failure()
            raise

    async def delete(self, slug: str) -> None:
        snapshot = list(self._unions)
        self._unions = [union for union in self._unions if union.slug != slug]
        try:
            await self.store.delete_union(slug)
        except Exception:
            log.exception("Deleting %s failed; restoring local state", slug)
            self._unions = snapshot
            await self._reload_after_failure()
            raise

    def _upsert(self, union: Union) -> None:
        for index, existing in enumerate(self._unions):
            if existing.slug == union.slug:
                self._unions[index] = union
                return
        self._unions.insert(0, union)

    async def _reload_after_failure(self) -> None:
        try:
            await self.load()
        except Exception:  # noqa: BLE001
            # caller re-raises the write error, not this one
            log.warning("Reload after failed write also failed; keeping last known state")
