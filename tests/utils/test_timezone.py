"""Tests for timezone utility functions."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfoNotFoundError
import pytest

from workout_companion.utils.timezone import (
    filter_summaries_by_local_date_range,
    local_start_date,
)


class TestLocalStartDate:
    """Test resolving a workout's local start date."""

    def test_no_timezone_uses_utc_date(self, summary_factory):
        summary = summary_factory.make(
            {"start": datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)}
        )
        assert local_start_date(summary) == date(2025, 1, 15)

    def test_timezone_conversion_applies(self, summary_factory):
        summary = summary_factory.make(
            {"start": datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)}
        )
        # Previous evening in Honolulu
        assert local_start_date(summary, "Pacific/Honolulu") == date(2025, 1, 14)

    def test_invalid_timezone_raises(self, summary_factory):
        with pytest.raises(ZoneInfoNotFoundError):
            local_start_date(summary_factory.make(), "Not/AZone")


class TestFilterSummariesByLocalDateRange:
    """Test filtering summaries by local date range."""

    def test_inclusive_bounds(self, summary_factory):
        summaries = [
            summary_factory.make(
                {"id": f"w{day}", "start": datetime(2025, 1, day, 12, tzinfo=timezone.utc)}
            )
            for day in (14, 15, 16, 17)
        ]

        result = filter_summaries_by_local_date_range(
            summaries, date(2025, 1, 15), date(2025, 1, 16)
        )

        assert [s.id for s in result] == ["w15", "w16"]

    def test_timezone_moves_workout_across_boundary(self, summary_factory):
        late = summary_factory.make(
            {"start": datetime(2025, 1, 16, 2, 0, tzinfo=timezone.utc)}
        )

        assert filter_summaries_by_local_date_range(
            [late], date(2025, 1, 15), date(2025, 1, 15)
        ) == []
        assert filter_summaries_by_local_date_range(
            [late], date(2025, 1, 15), date(2025, 1, 15), "America/New_York"
        ) == [late]

    def test_empty(self):
        assert filter_summaries_by_local_date_range([], date(2025, 1, 1), date(2025, 1, 2)) == []
