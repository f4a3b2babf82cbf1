"""Shared API response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class RefreshResponse(BaseModel):
    """Response model for summary refresh operations."""

    summary_count: int = Field(description="Number of workout summaries available")
    refreshed_at: datetime = Field(description="When the refresh completed")
    forced: bool = Field(description="Whether a full fetch was requested")
    message: str = Field(description="Human-readable status message")


class FetchStatusResponse(BaseModel):
    """Response model describing the state of the summary cache."""

    is_fetching: bool = Field(description="Whether a refresh is currently running")
    summary_count: int = Field(description="Number of summaries currently served")
    last_refreshed_at: datetime | None = Field(
        default=None, description="When the served summaries were last refreshed"
    )
    last_error: str | None = Field(
        default=None, description="Error from the most recent failed refresh"
    )
    workouts_completed: int | None = Field(
        default=None, description="Workouts aggregated so far by the latest full fetch"
    )
    workouts_total: int | None = Field(
        default=None, description="Workouts covered by the latest full fetch"
    )


class SummaryTotals(BaseModel):
    """Summed metrics over a set of workout summaries."""

    workout_count: int = 0
    duration: float = 0.0  # in seconds
    energy_burned: float = 0.0  # in kcal
    distance: float = 0.0  # in miles
    steps: float = 0.0
    active_minutes: float = 0.0
