import os

# The app validates its environment at import time.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("HEALTH_DATA_API_URL", "http://healthdata.test")

import pytest  # noqa: E402

from tests._factories import (  # noqa: E402
    WorkoutFactory,
    WorkoutSummaryFactory,
    FakeMetricsProvider,
    FakeWorkoutSource,
)


@pytest.fixture(scope="session")
def workout_factory() -> WorkoutFactory:
    return WorkoutFactory()


@pytest.fixture(scope="session")
def summary_factory() -> WorkoutSummaryFactory:
    return WorkoutSummaryFactory()


@pytest.fixture
def metrics_provider() -> FakeMetricsProvider:
    return FakeMetricsProvider()


@pytest.fixture
def workout_source(workout_factory: WorkoutFactory) -> FakeWorkoutSource:
    return FakeWorkoutSource(workouts=workout_factory.make_many(3))


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "appWorkouts.json"
