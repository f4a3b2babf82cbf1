import pytest
from fastapi.testclient import TestClient

from workout_companion.app import env_loader  # noqa: F401
from workout_companion.app.app import app
from workout_companion.app.dependencies import health_data_client, workout_cache
from workout_companion.config.pipeline import PipelineSettings
from workout_companion.load.workout_cache import WorkoutCache

from tests._factories import FakeWorkoutSource


@pytest.fixture
def cache(workout_source, metrics_provider, snapshot_path) -> WorkoutCache:
    """A summary cache backed by the in-memory fakes, with no pause between batches."""
    settings = PipelineSettings(
        batch_size=2, inter_batch_delay=0.0, snapshot_path=snapshot_path
    )
    return WorkoutCache(workout_source, metrics_provider, settings)


@pytest.fixture
def client(cache: WorkoutCache, workout_source: FakeWorkoutSource):
    """Test client whose dependencies never reach the real health-data service."""
    app.dependency_overrides[workout_cache] = lambda: cache
    app.dependency_overrides[health_data_client] = lambda: workout_source
    yield TestClient(app)
    app.dependency_overrides.clear()
