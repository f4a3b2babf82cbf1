import logging
import os
from functools import lru_cache

from workout_companion.config.pipeline import PipelineSettings
from workout_companion.integrations.healthdata import HealthDataClient
from workout_companion.load.workout_cache import WorkoutCache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def health_data_client() -> HealthDataClient:
    """Get a HealthDataClient configured from the environment."""
    timeout = float(os.environ.get("HEALTH_DATA_TIMEOUT_SECONDS", "10"))
    return HealthDataClient(
        base_url=os.environ["HEALTH_DATA_API_URL"],
        api_key=os.environ.get("HEALTH_DATA_API_KEY"),
        timeout=timeout,
    )


@lru_cache(maxsize=1)
def workout_cache() -> WorkoutCache:
    """Get the process-wide summary cache.

    There is one cache per process so that only one refresh runs at a time.
    """
    settings = PipelineSettings.from_env()
    logger.info(
        f"Creating workout cache: batch_size={settings.batch_size}, "
        f"inter_batch_delay={settings.inter_batch_delay}s, "
        f"snapshot_path={settings.snapshot_path}"
    )
    client = health_data_client()
    return WorkoutCache(source=client, provider=client, settings=settings)
