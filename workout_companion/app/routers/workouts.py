"""Workouts router: recent workouts straight from the health-data service."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from workout_companion.app.constants import DEFAULT_RECENT_DAYS, MAX_RECENT_DAYS
from workout_companion.app.dependencies import health_data_client
from workout_companion.errors import ProviderUnavailableError
from workout_companion.integrations.healthdata import HealthDataClient
from workout_companion.load.workouts import load_workouts
from workout_companion.models import Workout, WorkoutKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.get("/recent", response_model=list[Workout])
async def read_recent_workouts(
    days: int = Query(
        DEFAULT_RECENT_DAYS,
        ge=1,
        le=MAX_RECENT_DAYS,
        description="How many days back to look",
    ),
    kind: Optional[WorkoutKind] = Query(
        None, description="Only return workouts of this kind"
    ),
    client: HealthDataClient = Depends(health_data_client),
) -> list[Workout]:
    """Get workouts from the last `days` days, most recent first."""
    try:
        return await load_workouts(client, kind=kind, since_days=days)
    except ProviderUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
