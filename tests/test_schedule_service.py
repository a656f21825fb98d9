"""Tests for scrape scheduling in league time."""

from datetime import date, datetime

import pytest
import pytz

from services.schedule_service import (
    get_target_date,
    league_now,
    previous_day,
    should_skip_scrape_window,
)

EASTERN = pytz.timezone("America/New_York")


def _et(hour, minute=0, day=8):
    return EASTERN.localize(datetime(2025, 1, day, hour, minute))


class TestScrapeWindows:
    """Idle windows are skipped."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "hour,minute,skipped",
        [
            (1, 59, False),
            (2, 0, True),
            (3, 59, True),
            (4, 0, False),
            (4, 20, False),
            (4, 21, True),
            (7, 59, True),
            (8, 0, False),
            (8, 20, False),
            (8, 21, True),
            (11, 59, True),
            (12, 0, False),
            (23, 30, False),
        ],
    )
    def test_window_boundaries(self, hour, minute, skipped):
        assert should_skip_scrape_window(_et(hour, minute)) is skipped

    @pytest.mark.unit
    def test_windows_are_evaluated_in_league_time(self):
        # 07:30 UTC is 02:30 Eastern in January
        assert should_skip_scrape_window(datetime(2025, 1, 8, 7, 30)) is True
        assert should_skip_scrape_window(pytz.utc.localize(datetime(2025, 1, 8, 17, 0))) is False


class TestTargetDate:
    """Rollover at 7am league time."""

    @pytest.mark.unit
    def test_before_rollover_targets_yesterday(self):
        assert get_target_date(_et(6, 59)) == date(2025, 1, 7)
        assert get_target_date(_et(0, 5)) == date(2025, 1, 7)

    @pytest.mark.unit
    def test_after_rollover_targets_today(self):
        assert get_target_date(_et(7, 0)) == date(2025, 1, 8)
        assert get_target_date(_et(23, 59)) == date(2025, 1, 8)

    @pytest.mark.unit
    def test_naive_values_are_utc(self):
        # 11:59 UTC = 06:59 ET, 12:00 UTC = 07:00 ET
        assert get_target_date(datetime(2025, 1, 8, 11, 59)) == date(2025, 1, 7)
        assert get_target_date(datetime(2025, 1, 8, 12, 0)) == date(2025, 1, 8)

    @pytest.mark.unit
    def test_rollover_across_month_boundary(self):
        assert get_target_date(_et(3, 0, day=1)) == date(2024, 12, 31)

    @pytest.mark.unit
    def test_league_now_is_aware(self):
        assert league_now().tzinfo is not None


class TestDateHelpers:
    """Date arithmetic."""

    @pytest.mark.unit
    def test_previous_day(self):
        assert previous_day(date(2025, 3, 1)) == date(2025, 2, 28)
