"""Error types raised by the workout summary pipeline.

- ProviderUnavailableError: the workout/metrics source cannot be reached or
  refused the request. Aborts a refresh.
- MetricFetchError: a single metric for a single workout could not be fetched.
  Absorbed by the aggregation engine; the metric stays at zero.
- SnapshotNotFoundError / SnapshotCorruptError: the durable snapshot is missing
  or unreadable. Recovered by falling back to a full fetch.
- ConfigurationError: invalid pipeline settings. Raised when settings are built,
  never in the middle of a run.
"""


class WorkoutCompanionError(Exception):
    """Base class for all pipeline errors."""


class ProviderUnavailableError(WorkoutCompanionError):
    """Raised when the external health-data source cannot be used."""


class MetricFetchError(WorkoutCompanionError):
    """Raised when one metric kind for one workout could not be fetched.

    Attributes:
        kind: The metric kind that failed (e.g., "distance")
        workout_id: The workout the metric was requested for
        reason: Human-readable cause
    """

    def __init__(self, kind: str, workout_id: str, reason: str):
        self.kind = kind
        self.workout_id = workout_id
        self.reason = reason
        super().__init__(f"Failed to fetch {kind} for workout {workout_id}: {reason}")


class SnapshotError(WorkoutCompanionError):
    """Base class for durable snapshot problems that a full fetch can recover from."""


class SnapshotNotFoundError(SnapshotError):
    """Raised when no durable snapshot exists."""


class SnapshotCorruptError(SnapshotError):
    """Raised when the durable snapshot exists but cannot be decoded."""


class ConfigurationError(WorkoutCompanionError, ValueError):
    """Raised when pipeline settings are invalid."""
