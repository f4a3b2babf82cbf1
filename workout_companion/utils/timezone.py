"""Timezone utility functions for bucketing summaries by the user's local date."""

import zoneinfo
from datetime import date, timezone
from typing import Iterable

from workout_companion.models import WorkoutSummary


def local_start_date(summary: WorkoutSummary, user_timezone: str | None = None) -> date:
    """
    Get the calendar date a workout started on in the user's timezone.

    If user_timezone is None, uses the UTC date.
    """
    if user_timezone is None:
        return summary.start.astimezone(timezone.utc).date()
    return summary.start.astimezone(zoneinfo.ZoneInfo(user_timezone)).date()


def filter_summaries_by_local_date_range(
    summaries: Iterable[WorkoutSummary],
    start: date,
    end: date,
    user_timezone: str | None = None,
) -> list[WorkoutSummary]:
    """
    Filter summaries to those whose workout started within [start, end] in the user's timezone.
    """
    return [
        summary
        for summary in summaries
        if start <= local_start_date(summary, user_timezone) <= end
    ]
