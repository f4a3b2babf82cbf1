from __future__ import annotations
from typing import TYPE_CHECKING
from typing import Literal, Self
import logging
import math

from pydantic import AwareDatetime, BaseModel, ConfigDict, model_validator

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    # This prevents circular imports at runtime.
    from workout_companion.integrations.healthdata.models import HealthDataWorkout


WorkoutKind = Literal["running", "walking", "cycling", "other"]
MetricKind = Literal["energy_burned", "distance", "steps", "active_minutes"]

# Every metric fetched per workout, in the order they are requested.
METRIC_KINDS: tuple[MetricKind, ...] = (
    "energy_burned",
    "distance",
    "steps",
    "active_minutes",
)
# Units the health-data service reports each metric sum in.
METRIC_UNITS: dict[MetricKind, str] = {
    "energy_burned": "kcal",
    "distance": "mi",
    "steps": "count",
    "active_minutes": "min",
}

# Metadata key the health-data service uses for average METs.
AVERAGE_METS_KEY = "HKAverageMETs"


class TimeRange(BaseModel):
    """A closed interval of time that metric samples are summed over."""

    model_config = ConfigDict(frozen=True)

    start: AwareDatetime
    end: AwareDatetime

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Self:
        if self.end < self.start:
            raise ValueError(
                f"end ({self.end.isoformat()}) precedes start ({self.start.isoformat()})"
            )
        return self


class Workout(BaseModel):
    """A completed exercise session as reported by the workout source."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    workout_type: WorkoutKind
    start: AwareDatetime
    end: AwareDatetime
    duration: float  # in seconds
    average_mets: float | None = None  # kcal/(kg*hr)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    @classmethod
    def from_health_data(cls, workout: HealthDataWorkout) -> Self:
        """Create a Workout from a health-data service record.

        The average METs value is read from the record's metadata when it is a finite,
        non-negative number; anything else is ignored rather than failing the whole
        workout.
        """
        average_mets = None
        raw_mets = workout.metadata.get(AVERAGE_METS_KEY)
        if raw_mets is not None:
            try:
                average_mets = float(raw_mets)
            except (TypeError, ValueError):
                logger.warning(
                    f"Ignoring non-numeric {AVERAGE_METS_KEY} on workout {workout.uuid}: "
                    f"{raw_mets!r}"
                )
            else:
                # JSON has no inf/nan, so a snapshot holding one would not reload.
                if not math.isfinite(average_mets) or average_mets < 0:
                    logger.warning(
                        f"Ignoring out-of-range {AVERAGE_METS_KEY} on workout "
                        f"{workout.uuid}: {raw_mets!r}"
                    )
                    average_mets = None
        return cls(
            id=workout.uuid,
            workout_type=workout.workout_type(),
            start=workout.start_date,
            end=workout.end_date,
            duration=workout.duration,
            average_mets=average_mets,
        )


class WorkoutSummary(BaseModel):
    """Per-workout accumulation of every metric kind plus the workout's own fields.

    Metric fields start at zero and are filled in one at a time as fetches finish,
    so a partially populated summary is a valid (if incomplete) summary.
    """

    model_config = ConfigDict(validate_assignment=True, allow_inf_nan=False)

    id: str
    start: AwareDatetime
    end: AwareDatetime
    duration: float
    mets: float = 0.0
    energy_burned: float = 0.0  # in kcal
    distance: float = 0.0  # in miles
    steps: float = 0.0
    active_minutes: float = 0.0

    @classmethod
    def from_workout(cls, workout: Workout) -> Self:
        """Create an empty summary carrying the workout's pass-through fields."""
        return cls(
            id=workout.id,
            start=workout.start,
            end=workout.end,
            duration=workout.duration,
            mets=workout.average_mets or 0.0,
        )

    def set_metric(self, kind: MetricKind, value: float) -> None:
        """Write the field for a single metric kind."""
        if kind not in METRIC_UNITS:
            raise ValueError(f"Unknown metric kind: {kind}")
        setattr(self, kind, value)

    def metric(self, kind: MetricKind) -> float:
        return getattr(self, kind)


# Workout id -> summary for every workout covered by one refresh.
SummarySet = dict[str, WorkoutSummary]
