"""In-memory store of workout summaries shared by concurrent metric fetches."""

import asyncio
import logging
from typing import Callable, Optional

from workout_companion.models import SummarySet, WorkoutSummary

logger = logging.getLogger(__name__)

SummaryMutator = Callable[[WorkoutSummary], None]


class SummaryStore:
    """Map of workout id to summary with per-workout exclusive upserts.

    Each workout id gets its own lock, so fetches for different workouts never
    wait on each other while fetches for the same workout apply their field
    writes one at a time. Mutators are synchronous, which means a snapshot taken
    between awaits never sees a mutation half-applied.
    """

    def __init__(self, summaries: Optional[SummarySet] = None):
        self._summaries: SummarySet = {}
        self._locks: dict[str, asyncio.Lock] = {}
        for workout_id, summary in (summaries or {}).items():
            self._summaries[workout_id] = summary.model_copy()

    def __len__(self) -> int:
        return len(self._summaries)

    def __contains__(self, workout_id: object) -> bool:
        return workout_id in self._summaries

    def _lock_for(self, workout_id: str) -> asyncio.Lock:
        lock = self._locks.get(workout_id)
        if lock is None:
            lock = self._locks[workout_id] = asyncio.Lock()
        return lock

    def get(self, workout_id: str) -> WorkoutSummary | None:
        """Get a copy of the summary for a workout, or None if it isn't stored."""
        summary = self._summaries.get(workout_id)
        return summary.model_copy() if summary is not None else None

    async def put(self, summary: WorkoutSummary) -> None:
        """Store a summary, replacing any existing entry for the same workout."""
        async with self._lock_for(summary.id):
            self._summaries[summary.id] = summary.model_copy()

    async def upsert(
        self,
        workout_id: str,
        mutator: SummaryMutator,
        default: Callable[[], WorkoutSummary] | None = None,
    ) -> WorkoutSummary:
        """Apply a mutation to a workout's summary under that workout's lock.

        A missing entry can't be created from the id alone because a summary also
        needs the workout's start, end and duration. Callers either `put` the
        entry first (as the aggregation engine does) or pass `default`.

        Args:
            workout_id: The workout whose summary is mutated.
            mutator: Writes one or more fields of the summary in place.
            default: Builds the entry if the workout isn't stored yet.

        Returns:
            A copy of the summary after the mutation.

        Raises:
            KeyError: If the workout isn't stored and no default was given.
        """
        async with self._lock_for(workout_id):
            summary = self._summaries.get(workout_id)
            if summary is None:
                if default is None:
                    raise KeyError(workout_id)
                summary = default()
                if summary.id != workout_id:
                    raise ValueError(
                        f"Default summary id {summary.id} does not match {workout_id}"
                    )
                self._summaries[workout_id] = summary
            mutator(summary)
            return summary.model_copy()

    def snapshot(self) -> SummarySet:
        """Return a copy of every stored summary."""
        return {
            workout_id: summary.model_copy()
            for workout_id, summary in self._summaries.items()
        }
