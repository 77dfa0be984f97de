"""Sequential, throttled, failure-isolated reconciliation across many unions.

Unions are processed strictly one at a time. The generative service rate
limits aggressively, so after every successful union the pipeline waits a
fixed cooldown before starting the next one. A failure for one union is logged
and recorded, and the run moves on; nothing is retried within a run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from unionwatch.domain.model import Union

log = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 2.0

type ReconcileOne = Callable[[Union], Awaitable[Union]]
type PersistOne = Callable[[Union], Awaitable[None]]
type Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class BatchProgress:
    """Snapshot emitted before a union is processed. ``index`` is 1-based."""

    index: int
    total: int
    name: str


@dataclass(frozen=True, slots=True)
class BatchFailure:
    slug: str
    name: str
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass(slots=True)
class BatchReport:
    total: int
    succeeded: list[str] = field(default_factory=list[str])
    failed: list[BatchFailure] = field(default_factory=list[BatchFailure])
    stopped_early: bool = False

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)


@dataclass(slots=True)
class BatchPipeline:
    reconcile: ReconcileOne
    persist: PersistOne
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS
    sleep: Sleep = asyncio.sleep
    should_continue: Callable[[], bool] | None = None

    async def stream(
        self,
        unions: Sequence[Union],
        *,
        report: BatchReport | None = None,
    ) -> AsyncIterator[BatchProgress]:
        """Process ``unions`` in order, yielding a progress snapshot before each one."""

        items = list(unions)
        total = len(items)
        active_report = report if report is not None else BatchReport(total=total)

        for index, union in enumerate(items, start=1):
            if self.should_continue is not None and not self.should_continue():
                log.info("Batch stopped before %s/%s (%s)", index, total, union.name)
                active_report.stopped_early = True
                return

            yield BatchProgress(index=index, total=total, name=union.name)

            try:
                merged = await self.reconcile(union)
                await self.persist(merged)
            except Exception as exc:
                log.exception("Batch update failed for %s (%s)", union.name, union.slug)
                active_report.failed.append(
                    BatchFailure(slug=union.slug, name=union.name, error=exc)
                )
                continue

            active_report.succeeded.append(union.slug)
            if index < total and self.cooldown_seconds > 0:
                await self.sleep(self.cooldown_seconds)

    async def run(
        self,
        unions: Sequence[Union],
        *,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> BatchReport:
        report = BatchReport(total=len(unions))
        async for progress in self.stream(unions, report=report):
            if on_progress is not None:
                on_progress(progress)
        log.info(
            "Batch finished: %s/%s succeeded, %s failed%s",
            len(report.succeeded),
            report.total,
            len(report.failed),
            " (stopped early)" if report.stopped_early else "",
        )
        return report
