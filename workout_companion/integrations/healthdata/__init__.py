"""Health-data service integration for fetching workouts and their statistics."""

from .client import HealthDataClient, QUANTITY_TYPES
from .models import HealthDataWorkout, HealthDataStatistics

__all__ = [
    "HealthDataClient",
    "QUANTITY_TYPES",
    "HealthDataWorkout",
    "HealthDataStatistics",
]
