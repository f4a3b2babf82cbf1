"""Interfaces the summary pipeline consumes from external data sources."""

from __future__ import annotations
from typing import Protocol

from workout_companion.models import MetricKind, TimeRange, Workout, WorkoutKind


class MetricsProvider(Protocol):
    async def sum(
        self, kind: MetricKind, workout_id: str, time_range: TimeRange
    ) -> float:
        """Return the cumulative sum of a metric over a workout's time range.

        A range without samples sums to 0.0. Raises MetricFetchError on failure.
        """
        ...


class WorkoutSource(Protocol):
    async def list_recent(
        self, kind: WorkoutKind | None = None, since_days: int | None = None
    ) -> list[Workout]:
        """Return workouts most-recent-first.

        `kind=None` returns every workout type and `since_days=None` returns all
        history. Raises ProviderUnavailableError if the source cannot be used.
        """
        ...
