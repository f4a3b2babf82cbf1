"""Sequential batches of concurrent workout aggregations.

Workouts are split into fixed-size batches. Every workout in a batch is
aggregated concurrently, and the next batch starts only once the whole batch has
finished and the inter-batch pause has elapsed. This bounds how many statistics
requests are in flight against the provider at once.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from workout_companion.errors import ConfigurationError
from workout_companion.models import Workout
from .aggregation import AggregationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Batch:
    index: int
    start: int  # index of the first workout in the batch
    stop: int  # one past the last workout in the batch
    workouts: Sequence[Workout]


@dataclass(frozen=True)
class BatchProgress:
    """Reported after each batch finishes."""

    batch_index: int
    batch_count: int
    first_index: int
    last_index: int  # inclusive
    completed: int  # workouts covered by this and every earlier batch
    total: int


@dataclass(frozen=True)
class BatchRunReport:
    workout_count: int
    batch_count: int
    batches_completed: int
    cancelled: bool
    elapsed_seconds: float


BatchDoneCallback = Callable[[BatchProgress], None]
AllDoneCallback = Callable[[BatchRunReport], None]


def partition(workouts: Sequence[Workout], batch_size: int) -> Iterator[Batch]:
    """Split workouts into consecutive batches of `batch_size`.

    The last batch holds whatever is left over and may be shorter.
    """
    if batch_size <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
    for index, start in enumerate(range(0, len(workouts), batch_size)):
        stop = min(start + batch_size, len(workouts))
        yield Batch(index=index, start=start, stop=stop, workouts=workouts[start:stop])


def batch_count(workout_count: int, batch_size: int) -> int:
    return -(-workout_count // batch_size)


class BatchScheduler:
    def __init__(
        self,
        engine: AggregationEngine,
        batch_size: int,
        inter_batch_delay: float = 5.0,
    ):
        if batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
        if inter_batch_delay < 0:
            raise ConfigurationError(
                f"inter_batch_delay must not be negative, got {inter_batch_delay}"
            )
        self.engine = engine
        self.batch_size = batch_size
        self.inter_batch_delay = inter_batch_delay

    async def run_all(
        self,
        workouts: Sequence[Workout],
        on_batch_done: Optional[BatchDoneCallback] = None,
        on_all_done: Optional[AllDoneCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchRunReport:
        """Aggregate every workout, one batch at a time.

        Args:
            workouts: The workouts to aggregate.
            on_batch_done: Called after each batch, in batch order.
            on_all_done: Called once after the last batch. Not called if the run is
                cancelled.
            cancel_event: Once set, no further batch is started. The batch already
                running is allowed to finish.
        """
        started = time.monotonic()
        total = len(workouts)
        count = batch_count(total, self.batch_size)
        completed_batches = 0
        cancelled = False

        logger.info(
            f"Aggregating {total} workouts in {count} batches of up to {self.batch_size}"
        )

        for batch in partition(workouts, self.batch_size):
            if batch.index > 0:
                await self._pause(cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                logger.info(
                    f"Cancellation requested; stopping before batch "
                    f"{batch.index + 1}/{count}"
                )
                cancelled = True
                break

            await asyncio.gather(*[self.engine.aggregate(w) for w in batch.workouts])
            completed_batches += 1

            progress = BatchProgress(
                batch_index=batch.index,
                batch_count=count,
                first_index=batch.start,
                last_index=batch.stop - 1,
                completed=batch.stop,
                total=total,
            )
            logger.info(
                f"Finished batch {batch.index + 1}/{count} "
                f"(workouts {progress.first_index}-{progress.last_index})"
            )
            if on_batch_done is not None:
                on_batch_done(progress)

        report = BatchRunReport(
            workout_count=total,
            batch_count=count,
            batches_completed=completed_batches,
            cancelled=cancelled,
            elapsed_seconds=time.monotonic() - started,
        )
        if not cancelled and on_all_done is not None:
            on_all_done(report)
        return report

    async def _pause(self, cancel_event: Optional[asyncio.Event]) -> None:
        """Wait out the inter-batch delay, waking early if cancellation is requested."""
        if self.inter_batch_delay <= 0:
            return
        if cancel_event is None:
            await asyncio.sleep(self.inter_batch_delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.inter_batch_delay)
        except asyncio.TimeoutError:
            pass
