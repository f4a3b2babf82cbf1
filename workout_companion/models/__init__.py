from .workout import (
    Workout,
    WorkoutKind,
    WorkoutSummary,
    SummarySet,
    TimeRange,
    MetricKind,
    METRIC_KINDS,
    METRIC_UNITS,
)
from .responses import RefreshResponse, FetchStatusResponse, SummaryTotals

__all__ = [
    "Workout",
    "WorkoutKind",
    "WorkoutSummary",
    "SummarySet",
    "TimeRange",
    "MetricKind",
    "METRIC_KINDS",
    "METRIC_UNITS",
    "RefreshResponse",
    "FetchStatusResponse",
    "SummaryTotals",
]
