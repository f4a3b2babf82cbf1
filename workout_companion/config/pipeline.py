"""Settings for the summary refresh pipeline, read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, get_args

from workout_companion.errors import ConfigurationError
from workout_companion.models import WorkoutKind

DEFAULT_BATCH_SIZE = 10
# The health-data service has no published rate limit; this pause between
# batches keeps bursts of statistics queries small.
DEFAULT_INTER_BATCH_DELAY = 5.0
DEFAULT_SNAPSHOT_PATH = Path("data") / "appWorkouts.json"
DEFAULT_WORKOUT_KIND: WorkoutKind = "running"


@dataclass(frozen=True)
class PipelineSettings:
    batch_size: int = DEFAULT_BATCH_SIZE
    inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY
    snapshot_path: Path = DEFAULT_SNAPSHOT_PATH
    workout_kind: WorkoutKind | None = DEFAULT_WORKOUT_KIND
    lookback_days: int | None = None  # None means all history

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError(
                f"batch_size must be positive, got {self.batch_size}"
            )
        if self.inter_batch_delay < 0:
            raise ConfigurationError(
                f"inter_batch_delay must not be negative, got {self.inter_batch_delay}"
            )
        if self.lookback_days is not None and self.lookback_days <= 0:
            raise ConfigurationError(
                f"lookback_days must be positive when set, got {self.lookback_days}"
            )
        if (
            self.workout_kind is not None
            and self.workout_kind not in get_args(WorkoutKind)
        ):
            raise ConfigurationError(f"Unknown workout kind: {self.workout_kind}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PipelineSettings":
        """Build settings from SUMMARY_* environment variables.

        Unset variables fall back to the defaults. Set-but-invalid values raise
        ConfigurationError so a bad deployment fails at startup.
        """
        if environ is None:
            environ = os.environ

        batch_size = _parse(environ, "SUMMARY_BATCH_SIZE", int, DEFAULT_BATCH_SIZE)
        delay = _parse(
            environ, "SUMMARY_BATCH_DELAY_SECONDS", float, DEFAULT_INTER_BATCH_DELAY
        )
        lookback_days = _parse(environ, "SUMMARY_LOOKBACK_DAYS", int, None)
        snapshot_path = Path(
            environ.get("SUMMARY_SNAPSHOT_PATH", str(DEFAULT_SNAPSHOT_PATH))
        )
        workout_kind = environ.get("SUMMARY_WORKOUT_KIND", DEFAULT_WORKOUT_KIND)
        if workout_kind.lower() in ("", "all", "any"):
            workout_kind = None

        return cls(
            batch_size=batch_size,
            inter_batch_delay=delay,
            snapshot_path=snapshot_path,
            workout_kind=workout_kind,  # type: ignore[arg-type]
            lookback_days=lookback_days,
        )


def _parse(environ: Mapping[str, str], name: str, type_, default):
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return type_(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from e
