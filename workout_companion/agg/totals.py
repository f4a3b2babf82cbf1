from datetime import date, timedelta
from typing import Iterable

from workout_companion.models import METRIC_KINDS, SummaryTotals, WorkoutSummary
from workout_companion.utils.timezone import (
    filter_summaries_by_local_date_range,
    local_start_date,
)


def _sum_summaries(summaries: Iterable[WorkoutSummary]) -> SummaryTotals:
    totals: dict[str, float] = {"duration": 0.0}
    totals.update({kind: 0.0 for kind in METRIC_KINDS})
    count = 0
    for summary in summaries:
        count += 1
        totals["duration"] += summary.duration
        for kind in METRIC_KINDS:
            totals[kind] += summary.metric(kind)
    # Round so that repeated float addition doesn't leave noise in the totals.
    rounded = {name: round(value, 4) for name, value in totals.items()}
    return SummaryTotals(workout_count=count, **rounded)


def summary_totals(
    summaries: Iterable[WorkoutSummary],
    start: date,
    end: date,
    user_timezone: str | None = None,
) -> SummaryTotals:
    """
    Sum every metric over the workouts that started in [start, end].

    Args:
        summaries: Workout summaries (with UTC start times)
        start: Start date in user's timezone
        end: End date in user's timezone
        user_timezone: User's timezone (e.g., "America/Chicago"). If None, uses UTC dates.
    """
    filtered = filter_summaries_by_local_date_range(
        summaries, start, end, user_timezone
    )
    return _sum_summaries(filtered)


def totals_by_day(
    summaries: Iterable[WorkoutSummary],
    start: date,
    end: date,
    user_timezone: str | None = None,
) -> list[tuple[date, SummaryTotals]]:
    """
    Sum every metric for each day in [start, end], including days without workouts.
    """
    by_day: dict[date, list[WorkoutSummary]] = {}
    for summary in summaries:
        day = local_start_date(summary, user_timezone)
        if start <= day <= end:
            by_day.setdefault(day, []).append(summary)

    total_days = (end - start).days + 1
    result: list[tuple[date, SummaryTotals]] = []
    for offset in range(max(total_days, 0)):
        day = start + timedelta(days=offset)
        result.append((day, _sum_summaries(by_day.get(day, []))))
    return result
