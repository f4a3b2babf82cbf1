from .aggregation import AggregationEngine
from .batching import BatchScheduler, BatchProgress, BatchRunReport, partition
from .totals import summary_totals, totals_by_day

__all__ = [
    "AggregationEngine",
    "BatchScheduler",
    "BatchProgress",
    "BatchRunReport",
    "partition",
    "summary_totals",
    "totals_by_day",
]
