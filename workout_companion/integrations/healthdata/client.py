"""Health-data service client for fetching workouts and per-workout statistics."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from workout_companion.errors import MetricFetchError, ProviderUnavailableError
from workout_companion.models import (
    METRIC_UNITS,
    MetricKind,
    TimeRange,
    Workout,
    WorkoutKind,
)
from .models import HealthDataStatistics, workout_list_adapter

logger = logging.getLogger(__name__)

WORKOUTS_PATH = "/v1/workouts"

# Quantity types the service sums for each metric kind.
QUANTITY_TYPES: dict[MetricKind, str] = {
    "energy_burned": "active_energy_burned",
    "distance": "distance_walking_running",
    "steps": "step_count",
    "active_minutes": "apple_exercise_time",
}


@dataclass
class HealthDataClient:
    """Client for the health-data REST service.

    Implements both the workout source and the metrics provider the summary
    pipeline consumes.
    """

    base_url: str
    api_key: str | None = None
    timeout: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def _auth_headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {
            "Authorization": f"Bearer {self.api_key}",
        }

    async def _make_request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Make an API request to the health-data service.

        Raises httpx.HTTPError on transport failures; status handling is left to
        the caller.
        """
        kwargs.setdefault("timeout", self.timeout)

        async with httpx.AsyncClient(
            base_url=self.base_url, transport=self.transport
        ) as client:
            return await client.request(
                method, path, headers=self._auth_headers(), **kwargs
            )

    async def list_recent(
        self, kind: WorkoutKind | None = None, since_days: Optional[int] = None
    ) -> list[Workout]:
        """Get workouts from the service, most recent first.

        Args:
            kind: Only return workouts of this kind. None returns every kind.
            since_days: Only return workouts that started in the last `since_days`
                days. None returns all history.
        """
        params: dict[str, str] = {}
        if kind is not None:
            params["type"] = kind
        if since_days is not None:
            since = datetime.now(timezone.utc) - timedelta(days=since_days)
            params["since"] = since.isoformat()

        logger.debug(f"Requesting health-data workouts: {params}")

        try:
            response = await self._make_request("GET", WORKOUTS_PATH, params=params)
        except httpx.HTTPError as e:
            logger.error(
                f"Health-data service unreachable while listing workouts: "
                f"exception_type={type(e).__name__}, error={e}"
            )
            raise ProviderUnavailableError(
                f"Health-data service unreachable: {e}"
            ) from e

        if response.status_code in (401, 403):
            logger.error(
                f"Health-data service refused workout listing: {response.status_code}"
            )
            raise ProviderUnavailableError(
                f"Not authorized to read workouts ({response.status_code})"
            )

        if response.status_code != 200:
            logger.error(
                f"Health-data service error listing workouts: "
                f"{response.status_code} {response.text}"
            )
            raise ProviderUnavailableError(
                f"Health-data service returned {response.status_code} listing workouts"
            )

        try:
            raw_workouts = workout_list_adapter.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed workout listing from health-data service: {e}")
            raise ProviderUnavailableError("Malformed workout listing") from e

        workouts = [Workout.from_health_data(w) for w in raw_workouts]
        workouts.sort(key=lambda w: w.end, reverse=True)
        logger.debug(f"Received {len(workouts)} workouts from health-data service")
        return workouts

    async def sum(
        self, kind: MetricKind, workout_id: str, time_range: TimeRange
    ) -> float:
        """Get the cumulative sum of one metric over a workout.

        Returns 0.0 when the workout has no samples of that kind.
        """
        quantity_type = QUANTITY_TYPES[kind]
        params = {
            "start": time_range.start.isoformat(),
            "end": time_range.end.isoformat(),
            "unit": METRIC_UNITS[kind],
        }
        path = f"{WORKOUTS_PATH}/{workout_id}/statistics/{quantity_type}"

        try:
            response = await self._make_request("GET", path, params=params)
        except httpx.HTTPError as e:
            raise MetricFetchError(kind, workout_id, f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            logger.debug(f"No {quantity_type} samples for workout {workout_id}")
            return 0.0

        if response.status_code != 200:
            raise MetricFetchError(
                kind, workout_id, f"status {response.status_code} {response.text}"
            )

        try:
            statistics = HealthDataStatistics.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MetricFetchError(kind, workout_id, "malformed statistics") from e

        return statistics.sum_or_zero()
