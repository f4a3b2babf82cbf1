from datetime import timedelta

import pytest

from workout_companion.errors import ProviderUnavailableError
from workout_companion.load.workouts import load_workouts

from tests._factories import FakeWorkoutSource


@pytest.mark.asyncio
async def test_load_passes_filters_to_source(workout_factory):
    source = FakeWorkoutSource(workouts=workout_factory.make_many(2))

    workouts = await load_workouts(source, kind="running", since_days=7)

    assert source.calls == [("running", 7)]
    assert [w.id for w in workouts] == ["workout_0", "workout_1"]


@pytest.mark.asyncio
async def test_load_defaults_to_all_running_history(workout_factory):
    source = FakeWorkoutSource(workouts=workout_factory.make_many(1))

    await load_workouts(source)

    assert source.calls == [("running", None)]


@pytest.mark.asyncio
async def test_load_drops_sub_second_workouts(workout_factory):
    keep = workout_factory.make({"id": "keep"})
    blip = workout_factory.make(
        {"id": "blip", "duration": 0.4, "end": keep.start + timedelta(seconds=0.4)}
    )
    source = FakeWorkoutSource(workouts=[keep, blip])

    workouts = await load_workouts(source)

    assert [w.id for w in workouts] == ["keep"]


@pytest.mark.asyncio
async def test_load_drops_duplicate_ids(workout_factory):
    first = workout_factory.make({"id": "dup", "duration": 100.0})
    second = workout_factory.make({"id": "dup", "duration": 200.0})
    source = FakeWorkoutSource(workouts=[first, second])

    workouts = await load_workouts(source)

    assert len(workouts) == 1
    assert workouts[0].duration == 100.0


@pytest.mark.asyncio
async def test_load_propagates_provider_errors():
    source = FakeWorkoutSource(unavailable=True)

    with pytest.raises(ProviderUnavailableError):
        await load_workouts(source)
