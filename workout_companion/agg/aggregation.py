import asyncio
import logging
import math
from functools import partial
from typing import Sequence

from workout_companion.db.summary_store import SummaryStore
from workout_companion.integrations.protocols import MetricsProvider
from workout_companion.models import (
    METRIC_KINDS,
    MetricKind,
    Workout,
    WorkoutSummary,
)

logger = logging.getLogger(__name__)


def _set_metric(summary: WorkoutSummary, kind: MetricKind, value: float) -> None:
    summary.set_metric(kind, value)


class AggregationEngine:
    """Build one workout's summary by fetching every metric kind concurrently.

    A failed fetch leaves its field at zero; it never fails the aggregation or
    the other fetches for the same workout.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        store: SummaryStore,
        metric_kinds: Sequence[MetricKind] = METRIC_KINDS,
    ):
        self.provider = provider
        self.store = store
        self.metric_kinds = tuple(metric_kinds)

    async def aggregate(self, workout: Workout) -> WorkoutSummary:
        """Fetch all metrics for a workout and merge them into its summary."""
        await self.store.put(WorkoutSummary.from_workout(workout))

        results = await asyncio.gather(
            *[self._fetch_metric(workout, kind) for kind in self.metric_kinds]
        )
        fetched = sum(1 for ok in results if ok)
        logger.debug(
            f"Aggregated workout {workout.id}: "
            f"{fetched}/{len(self.metric_kinds)} metrics fetched"
        )

        summary = self.store.get(workout.id)
        if summary is None:
            # Entries are never removed mid-run.
            raise KeyError(f"Summary for workout {workout.id} vanished during aggregation")
        return summary

    async def _fetch_metric(self, workout: Workout, kind: MetricKind) -> bool:
        """Fetch one metric and write it into the store. Returns whether it succeeded."""
        try:
            value = float(
                await self.provider.sum(kind, workout.id, workout.time_range)
            )
        except Exception as e:
            logger.warning(
                f"Skipping {kind} for workout {workout.id}: "
                f"exception_type={type(e).__name__}, error={e}"
            )
            return False

        if not math.isfinite(value) or value < 0:
            logger.warning(
                f"Skipping {kind} for workout {workout.id}: invalid value {value!r}"
            )
            return False

        await self.store.upsert(workout.id, partial(_set_metric, kind=kind, value=value))
        return True
