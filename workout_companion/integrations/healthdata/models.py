"""Pydantic models for health-data service responses."""

from __future__ import annotations
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, TypeAdapter

from workout_companion.models import WorkoutKind

# Map the service's activity types to our workout kinds.
ActivityTypeMap: dict[str, WorkoutKind] = {
    "running": "running",
    "run": "running",
    "walking": "walking",
    "walk": "walking",
    "cycling": "cycling",
    "ride": "cycling",
}


class HealthDataWorkout(BaseModel):
    """A workout sample from the /v1/workouts endpoint."""

    model_config = ConfigDict(allow_inf_nan=False)

    uuid: str
    workout_activity_type: str
    start_date: AwareDatetime
    end_date: AwareDatetime
    duration: float  # in seconds
    metadata: dict[str, Any] = {}

    def workout_type(self) -> WorkoutKind:
        return ActivityTypeMap.get(self.workout_activity_type.lower(), "other")


class HealthDataStatistics(BaseModel):
    """A cumulative-sum statistics result for one quantity type."""

    quantity_type: str
    sum_quantity: float | None = None
    unit: str | None = None

    def sum_or_zero(self) -> float:
        return self.sum_quantity if self.sum_quantity is not None else 0.0


# Type adapters for parsing API responses
workout_list_adapter = TypeAdapter(list[HealthDataWorkout])
