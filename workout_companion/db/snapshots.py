"""Durable storage for summary sets.

The whole summary set is written as one JSON document so the app can serve the
last refresh's results without refetching every metric on startup.
"""

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError

from workout_companion.errors import SnapshotCorruptError, SnapshotNotFoundError
from workout_companion.models import SummarySet, WorkoutSummary

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class SummarySnapshot(BaseModel):
    """On-disk representation of a summary set."""

    version: Literal[1] = SNAPSHOT_VERSION
    saved_at: datetime
    summaries: dict[str, WorkoutSummary]


def snapshot_exists(path: Path) -> bool:
    """Check whether a durable snapshot has been written at `path`."""
    return path.is_file()


async def save_summaries(summaries: SummarySet, path: Path) -> None:
    """Write a summary set to `path`, replacing any previous snapshot.

    The document is written to a sibling temp file and renamed into place, so a
    crash mid-write leaves the previous snapshot intact.
    """
    snapshot = SummarySnapshot(
        saved_at=datetime.now(timezone.utc),
        summaries=summaries,
    )
    payload = snapshot.model_dump_json(indent=2)
    await asyncio.to_thread(_write_atomically, path, payload)
    logger.info(f"Saved {len(summaries)} workout summaries to {path}")


async def load_summaries(path: Path) -> SummarySet:
    """Read a summary set previously written by `save_summaries`.

    Raises:
        SnapshotNotFoundError: If there is no snapshot at `path`.
        SnapshotCorruptError: If the snapshot can't be decoded.
    """
    try:
        payload = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError as e:
        raise SnapshotNotFoundError(f"No summary snapshot at {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotCorruptError(f"Unreadable summary snapshot at {path}: {e}") from e

    try:
        snapshot = SummarySnapshot.model_validate_json(payload)
    except ValidationError as e:
        raise SnapshotCorruptError(
            f"Malformed summary snapshot at {path}: {e.error_count()} errors"
        ) from e

    mismatched = [
        workout_id
        for workout_id, summary in snapshot.summaries.items()
        if summary.id != workout_id
    ]
    if mismatched:
        raise SnapshotCorruptError(
            f"Summary snapshot at {path} has entries keyed by the wrong id: {mismatched}"
        )

    logger.info(
        f"Loaded {len(snapshot.summaries)} workout summaries from {path} "
        f"(saved at {snapshot.saved_at.isoformat()})"
    )
    return snapshot.summaries


def _write_atomically(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    os.replace(tmp_path, path)
