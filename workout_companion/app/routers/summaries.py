"""Summaries router: serve, refresh and total per-workout summaries."""

import logging
import zoneinfo
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from workout_companion.agg.totals import summary_totals, totals_by_day
from workout_companion.app.dependencies import workout_cache
from workout_companion.load.workout_cache import WorkoutCache
from workout_companion.models import (
    FetchStatusResponse,
    RefreshResponse,
    SummaryTotals,
    WorkoutSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/summaries", tags=["summaries"])


@router.get("", response_model=list[WorkoutSummary])
def read_summaries(cache: WorkoutCache = Depends(workout_cache)) -> list[WorkoutSummary]:
    """Get the summaries currently served, most recent workout first.

    Never triggers a fetch; call POST /summaries/refresh for that.
    """
    summaries = cache.current_snapshot().values()
    return sorted(summaries, key=lambda s: s.start, reverse=True)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_summaries(
    force: bool = Query(
        False,
        description="Fetch every workout's metrics from the provider even if a "
        "saved snapshot exists.",
    ),
    cache: WorkoutCache = Depends(workout_cache),
) -> RefreshResponse:
    """Refresh the served summaries.

    Without `force`, reloads the saved snapshot if there is one. If a refresh is
    already running, waits for it instead of starting another.
    """
    outcome = await cache.refresh_outcome(force=force)
    if outcome.error is not None:
        raise HTTPException(
            status_code=503,
            detail=f"Summary refresh failed: {outcome.error}",
        )
    if outcome.cancelled or outcome.refreshed_at is None:
        raise HTTPException(
            status_code=409,
            detail="Summary refresh was cancelled; the previous summaries are "
            "still being served",
        )
    count = len(outcome.summaries)
    if outcome.from_snapshot:
        message = f"Loaded {count} workout summaries from snapshot"
    else:
        message = f"Refreshed {count} workout summaries (full fetch)"
    return RefreshResponse(
        summary_count=count,
        refreshed_at=outcome.refreshed_at,
        forced=force,
        message=message,
    )


@router.post("/refresh/cancel")
def cancel_refresh(cache: WorkoutCache = Depends(workout_cache)) -> dict[str, bool]:
    """Stop the running refresh after its current batch. Partial results aren't saved."""
    return {"cancelled": cache.cancel()}


@router.get("/status", response_model=FetchStatusResponse)
def read_status(cache: WorkoutCache = Depends(workout_cache)) -> FetchStatusResponse:
    """Get whether a refresh is running and how far the latest full fetch got."""
    progress = cache.last_progress
    return FetchStatusResponse(
        is_fetching=cache.is_fetching(),
        summary_count=len(cache.current_snapshot()),
        last_refreshed_at=cache.last_refreshed_at,
        last_error=cache.last_error,
        workouts_completed=progress.completed if progress else None,
        workouts_total=progress.total if progress else None,
    )


def _default_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    end = end or date.today()
    start = start or end - timedelta(days=6)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    return start, end


def _check_timezone(user_timezone: Optional[str]) -> None:
    if user_timezone is None:
        return
    try:
        zoneinfo.ZoneInfo(user_timezone)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=400, detail=f"Unknown timezone: {user_timezone}"
        )


@router.get("/totals", response_model=SummaryTotals)
def read_totals(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_timezone: Optional[str] = None,
    cache: WorkoutCache = Depends(workout_cache),
) -> SummaryTotals:
    """Sum every metric over workouts that started in [start, end].

    Defaults to the seven days ending today.
    """
    start, end = _default_range(start, end)
    _check_timezone(user_timezone)
    return summary_totals(
        cache.current_snapshot().values(), start, end, user_timezone
    )


@router.get("/totals/daily", response_model=list[tuple[date, SummaryTotals]])
def read_daily_totals(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_timezone: Optional[str] = None,
    cache: WorkoutCache = Depends(workout_cache),
) -> list[tuple[date, SummaryTotals]]:
    """Sum every metric per day over [start, end], including empty days."""
    start, end = _default_range(start, end)
    _check_timezone(user_timezone)
    return totals_by_day(cache.current_snapshot().values(), start, end, user_timezone)


@router.get("/{workout_id}", response_model=WorkoutSummary)
def read_summary(
    workout_id: str, cache: WorkoutCache = Depends(workout_cache)
) -> WorkoutSummary:
    """Get the summary for a single workout."""
    summary = cache.current_snapshot().get(workout_id)
    if summary is None:
        raise HTTPException(
            status_code=404, detail=f"No summary for workout {workout_id}"
        )
    return summary
