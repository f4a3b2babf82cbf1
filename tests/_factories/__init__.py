from .workout import WorkoutFactory, WorkoutSummaryFactory
from .providers import FakeMetricsProvider, FakeWorkoutSource, DEFAULT_METRIC_VALUES

__all__ = [
    "WorkoutFactory",
    "WorkoutSummaryFactory",
    "FakeMetricsProvider",
    "FakeWorkoutSource",
    "DEFAULT_METRIC_VALUES",
]
