import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from workout_companion.agg.aggregation import AggregationEngine
from workout_companion.agg.batching import BatchScheduler, batch_count, partition
from workout_companion.db.summary_store import SummaryStore
from workout_companion.errors import ConfigurationError

from tests._factories import FakeMetricsProvider


def _scheduler(provider, batch_size=10, delay=0.0, store=None) -> BatchScheduler:
    engine = AggregationEngine(provider, store if store is not None else SummaryStore())
    return BatchScheduler(engine, batch_size=batch_size, inter_batch_delay=delay)


class TestPartition:
    def test_25_workouts_in_batches_of_10(self, workout_factory):
        batches = list(partition(workout_factory.make_many(25), 10))

        assert [len(b.workouts) for b in batches] == [10, 10, 5]
        assert [(b.start, b.stop) for b in batches] == [(0, 10), (10, 20), (20, 25)]
        assert [b.index for b in batches] == [0, 1, 2]

    def test_batch_size_larger_than_set(self, workout_factory):
        batches = list(partition(workout_factory.make_many(3), 10))

        assert len(batches) == 1
        assert (batches[0].start, batches[0].stop) == (0, 3)

    def test_exact_multiple(self, workout_factory):
        batches = list(partition(workout_factory.make_many(20), 10))

        assert [len(b.workouts) for b in batches] == [10, 10]

    def test_empty(self):
        assert list(partition([], 10)) == []

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_non_positive_batch_size(self, batch_size):
        with pytest.raises(ConfigurationError):
            list(partition([], batch_size))

    def test_batch_count(self):
        assert batch_count(25, 10) == 3
        assert batch_count(20, 10) == 2
        assert batch_count(0, 10) == 0


class TestBatchSchedulerConfig:
    @pytest.mark.parametrize("batch_size", [0, -5])
    def test_non_positive_batch_size_rejected(self, batch_size, metrics_provider):
        with pytest.raises(ConfigurationError):
            _scheduler(metrics_provider, batch_size=batch_size)

    def test_negative_delay_rejected(self, metrics_provider):
        with pytest.raises(ConfigurationError):
            _scheduler(metrics_provider, delay=-1.0)


class TestRunAll:
    @pytest.mark.asyncio
    async def test_batch_callbacks_in_order(self, workout_factory, metrics_provider):
        events: list = []
        scheduler = _scheduler(metrics_provider, batch_size=10)

        report = await scheduler.run_all(
            workout_factory.make_many(25),
            on_batch_done=lambda p: events.append(("batch", p)),
            on_all_done=lambda r: events.append(("all", r)),
        )

        assert [kind for kind, _ in events] == ["batch", "batch", "batch", "all"]
        ranges = [(p.first_index, p.last_index) for kind, p in events if kind == "batch"]
        assert ranges == [(0, 9), (10, 19), (20, 24)]
        completed = [p.completed for kind, p in events if kind == "batch"]
        assert completed == [10, 20, 25]
        assert report.batch_count == 3
        assert report.batches_completed == 3
        assert report.cancelled is False
        assert events[-1][1] == report

    @pytest.mark.asyncio
    async def test_on_all_done_called_exactly_once(self, workout_factory, metrics_provider):
        on_all_done = MagicMock()
        scheduler = _scheduler(metrics_provider, batch_size=4)

        await scheduler.run_all(workout_factory.make_many(9), on_all_done=on_all_done)

        on_all_done.assert_called_once()

    @pytest.mark.asyncio
    async def test_every_workout_aggregated(self, workout_factory, metrics_provider):
        store = SummaryStore()
        scheduler = _scheduler(metrics_provider, batch_size=10, store=store)
        workouts = workout_factory.make_many(25)

        await scheduler.run_all(workouts)

        assert len(store) == 25
        assert len(metrics_provider.calls) == 25 * 4

    @pytest.mark.asyncio
    async def test_batch_completes_before_next_starts(self, workout_factory):
        """Each batch's fetches all finish before any of the next batch's start."""
        provider = FakeMetricsProvider(delay=0.001)
        seen_before_batch: list[int] = []
        scheduler = _scheduler(provider, batch_size=3)

        await scheduler.run_all(
            workout_factory.make_many(7),
            on_batch_done=lambda p: seen_before_batch.append(len(provider.calls)),
        )

        assert seen_before_batch == [12, 24, 28]
        # Never more than one batch's worth of fetches at once.
        assert provider.max_in_flight <= 3 * 4

    @pytest.mark.asyncio
    async def test_empty_set_calls_all_done_immediately(self, metrics_provider):
        on_batch_done = MagicMock()
        on_all_done = MagicMock()
        scheduler = _scheduler(metrics_provider)

        report = await scheduler.run_all(
            [], on_batch_done=on_batch_done, on_all_done=on_all_done
        )

        on_batch_done.assert_not_called()
        on_all_done.assert_called_once_with(report)
        assert metrics_provider.calls == []
        assert report.batch_count == 0

    @pytest.mark.asyncio
    async def test_failures_do_not_reach_scheduler(self, workout_factory):
        workouts = workout_factory.make_many(5)
        provider = FakeMetricsProvider(failures={("workout_2", "distance")})
        store = SummaryStore()
        scheduler = _scheduler(provider, batch_size=2, store=store)

        report = await scheduler.run_all(workouts)

        assert report.batches_completed == 3
        assert store.get("workout_2").distance == 0.0
        assert store.get("workout_3").distance == 4.2

    @pytest.mark.asyncio
    async def test_pauses_between_batches_only(self, workout_factory, metrics_provider):
        scheduler = _scheduler(metrics_provider, batch_size=2, delay=5.0)

        with patch.object(scheduler, "_pause", new=AsyncMock()) as mock_pause:
            await scheduler.run_all(workout_factory.make_many(5))

        # Three batches -> two pauses.
        assert mock_pause.await_count == 2

    @pytest.mark.asyncio
    async def test_pause_sleeps_for_configured_delay(self, metrics_provider):
        scheduler = _scheduler(metrics_provider, delay=5.0)

        with patch(
            "workout_companion.agg.batching.asyncio.sleep", new=AsyncMock()
        ) as mock_sleep:
            await scheduler._pause(None)

        mock_sleep.assert_awaited_once_with(5.0)

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self, metrics_provider):
        scheduler = _scheduler(metrics_provider, delay=0.0)

        with patch(
            "workout_companion.agg.batching.asyncio.sleep", new=AsyncMock()
        ) as mock_sleep:
            await scheduler._pause(asyncio.Event())

        mock_sleep.assert_not_awaited()


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_stops_new_batches(self, workout_factory, metrics_provider):
        cancel_event = asyncio.Event()
        on_all_done = MagicMock()
        store = SummaryStore()
        scheduler = _scheduler(metrics_provider, batch_size=2, store=store)

        report = await scheduler.run_all(
            workout_factory.make_many(6),
            on_batch_done=lambda p: cancel_event.set(),
            on_all_done=on_all_done,
            cancel_event=cancel_event,
        )

        assert report.cancelled is True
        assert report.batches_completed == 1
        on_all_done.assert_not_called()
        # The first batch drained fully.
        assert len(store) == 2
        assert store.get("workout_1").steps == 6000.0

    @pytest.mark.asyncio
    async def test_cancel_wakes_inter_batch_pause(self, workout_factory, metrics_provider):
        cancel_event = asyncio.Event()
        scheduler = _scheduler(metrics_provider, batch_size=1, delay=60.0)

        report = await asyncio.wait_for(
            scheduler.run_all(
                workout_factory.make_many(3),
                on_batch_done=lambda p: cancel_event.set(),
                cancel_event=cancel_event,
            ),
            timeout=5,
        )

        assert report.cancelled is True
        assert report.batches_completed == 1
