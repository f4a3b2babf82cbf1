import logging
import time
from typing import Optional

from workout_companion.integrations.protocols import WorkoutSource
from workout_companion.models import Workout, WorkoutKind

logger = logging.getLogger(__name__)

# Workouts shorter than this are accidental starts, not exercise sessions.
MIN_WORKOUT_DURATION_SECONDS = 1.0


async def load_workouts(
    source: WorkoutSource,
    kind: Optional[WorkoutKind] = "running",
    since_days: Optional[int] = None,
) -> list[Workout]:
    """Fetch workouts from the source, most recent first.

    Args:
        source: Where workouts come from.
        kind: Only load workouts of this kind. None loads every kind.
        since_days: Only load workouts from the last `since_days` days. None loads
            all history.

    Returns:
        Workouts lasting at least a second, without duplicate ids.
    """
    if since_days is None:
        logger.info(f"Loading all {kind or 'any'} workouts")
    else:
        logger.info(f"Loading {kind or 'any'} workouts from the last {since_days} days")

    started = time.monotonic()
    try:
        workouts = await source.list_recent(kind=kind, since_days=since_days)
    except Exception as e:
        logger.error(
            f"Failed to load workouts: {type(e).__name__}: {str(e)}",
            exc_info=True,
        )
        raise
    logger.info(
        f"Retrieved {len(workouts)} workouts in {time.monotonic() - started:.2f}s"
    )

    seen_ids: set[str] = set()
    kept: list[Workout] = []
    for workout in workouts:
        if workout.duration < MIN_WORKOUT_DURATION_SECONDS:
            continue
        if workout.id in seen_ids:
            logger.warning(f"Dropping duplicate workout {workout.id}")
            continue
        seen_ids.add(workout.id)
        kept.append(workout)

    skipped = len(workouts) - len(kept)
    if skipped:
        logger.info(f"Kept {len(kept)} workouts (skipped {skipped})")
    return kept
