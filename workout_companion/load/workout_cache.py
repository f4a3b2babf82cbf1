"""Stale-while-revalidate cache of workout summaries.

The cache serves the summaries from the last refresh. A refresh either reloads the
durable snapshot or, when forced (or when there is no usable snapshot), fetches
every workout's metrics from the provider and persists the result.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from workout_companion.agg.aggregation import AggregationEngine
from workout_companion.agg.batching import BatchProgress, BatchScheduler
from workout_companion.config.pipeline import PipelineSettings
from workout_companion.db.snapshots import load_summaries, save_summaries
from workout_companion.db.summary_store import SummaryStore
from workout_companion.errors import (
    ProviderUnavailableError,
    SnapshotCorruptError,
    SnapshotNotFoundError,
)
from workout_companion.integrations.protocols import MetricsProvider, WorkoutSource
from workout_companion.models import SummarySet
from .workouts import load_workouts

logger = logging.getLogger(__name__)


def _copy_summaries(summaries: SummarySet) -> SummarySet:
    return {workout_id: summary.model_copy() for workout_id, summary in summaries.items()}


@dataclass(frozen=True)
class RefreshOutcome:
    """What a single refresh run produced.

    Callers sharing an in-flight run all get the same outcome, so they never have
    to read cache-wide state that a later run may already have changed.
    """

    summaries: SummarySet = field(default_factory=dict)
    from_snapshot: bool = False
    cancelled: bool = False
    error: str | None = None  # set when the provider was unavailable
    refreshed_at: datetime | None = None  # None unless the summaries are now served

    @property
    def succeeded(self) -> bool:
        return not self.cancelled and self.error is None


def _copy_outcome(outcome: RefreshOutcome) -> RefreshOutcome:
    return replace(outcome, summaries=_copy_summaries(outcome.summaries))


class WorkoutCache:
    def __init__(
        self,
        source: WorkoutSource,
        provider: MetricsProvider,
        settings: Optional[PipelineSettings] = None,
    ):
        self.source = source
        self.provider = provider
        self.settings = settings if settings is not None else PipelineSettings()
        self.last_error: str | None = None
        self.last_refreshed_at: datetime | None = None
        self.last_progress: BatchProgress | None = None
        self._summaries: SummarySet = {}
        self._inflight: asyncio.Task[RefreshOutcome] | None = None
        self._cancel_event: asyncio.Event | None = None

    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def current_snapshot(self) -> SummarySet:
        """Get a copy of the summaries currently being served."""
        return _copy_summaries(self._summaries)

    def cancel(self) -> bool:
        """Ask the running refresh to stop after its current batch.

        Returns:
            True if a refresh was running, False otherwise.
        """
        if not self.is_fetching() or self._cancel_event is None:
            return False
        logger.info("Cancelling in-flight summary refresh")
        self._cancel_event.set()
        return True

    async def refresh(self, force: bool = False) -> SummarySet:
        """Refresh the served summaries.

        If a refresh is already running, waits for it and returns its result
        instead of starting another one.

        Args:
            force: Fetch everything from the provider even if a snapshot exists.

        Returns:
            The refreshed summaries, or an empty set if the provider was
            unavailable (in which case the served summaries are left as they were).
        """
        outcome = await self.refresh_outcome(force)
        return outcome.summaries

    async def refresh_outcome(self, force: bool = False) -> RefreshOutcome:
        """Like `refresh`, but report how the run ended along with its summaries."""
        if self._inflight is not None and not self._inflight.done():
            logger.info("Summary refresh already in progress, waiting for it")
            return _copy_outcome(await asyncio.shield(self._inflight))

        self._cancel_event = asyncio.Event()
        task = asyncio.create_task(self._refresh(force, self._cancel_event))
        task.add_done_callback(self._clear_inflight)
        self._inflight = task
        # Shielded so a caller giving up doesn't abandon the refresh halfway.
        return _copy_outcome(await asyncio.shield(task))

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
            self._cancel_event = None

    async def _refresh(self, force: bool, cancel_event: asyncio.Event) -> RefreshOutcome:
        if force:
            logger.info("Forced summary refresh requested")
            return await self._fetch_all(cancel_event)

        try:
            summaries = await load_summaries(self.settings.snapshot_path)
        except SnapshotNotFoundError:
            logger.info("No summary snapshot found, performing full fetch")
        except SnapshotCorruptError as e:
            logger.warning(f"Ignoring unusable summary snapshot ({e}), performing full fetch")
        else:
            return self._serve(summaries, from_snapshot=True)

        return await self._fetch_all(cancel_event)

    async def _fetch_all(self, cancel_event: asyncio.Event) -> RefreshOutcome:
        started = time.monotonic()
        try:
            workouts = await load_workouts(
                self.source,
                kind=self.settings.workout_kind,
                since_days=self.settings.lookback_days,
            )
        except ProviderUnavailableError as e:
            logger.error(f"Summary refresh failed, keeping previous summaries: {e}")
            self.last_error = str(e)
            return RefreshOutcome(error=str(e))

        store = SummaryStore()
        scheduler = BatchScheduler(
            AggregationEngine(self.provider, store),
            batch_size=self.settings.batch_size,
            inter_batch_delay=self.settings.inter_batch_delay,
        )
        self.last_progress = None
        report = await scheduler.run_all(
            workouts,
            on_batch_done=self._record_progress,
            cancel_event=cancel_event,
        )
        summaries = store.snapshot()

        if report.cancelled:
            logger.warning(
                f"Summary refresh cancelled after {report.batches_completed}/"
                f"{report.batch_count} batches; partial results were not saved"
            )
            return RefreshOutcome(summaries=summaries, cancelled=True)

        try:
            await save_summaries(summaries, self.settings.snapshot_path)
        except OSError as e:
            # The fresh summaries are still served, just not persisted.
            logger.error(f"Failed to save summary snapshot: {e}", exc_info=True)

        outcome = self._serve(summaries, from_snapshot=False)
        logger.info(
            f"Full summary fetch of {len(summaries)} workouts took "
            f"{time.monotonic() - started:.2f}s"
        )
        return outcome

    def _serve(self, summaries: SummarySet, from_snapshot: bool) -> RefreshOutcome:
        self._summaries = summaries
        self.last_refreshed_at = datetime.now(timezone.utc)
        self.last_error = None
        return RefreshOutcome(
            summaries=summaries,
            from_snapshot=from_snapshot,
            refreshed_at=self.last_refreshed_at,
        )

    def _record_progress(self, progress: BatchProgress) -> None:
        self.last_progress = progress
