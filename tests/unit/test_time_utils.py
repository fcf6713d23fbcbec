"""
Unit tests for time and date helpers.
"""
import pytest
from datetime import date, datetime, timezone

from spa_assistant.utils.time import (
    convert_military_to_12_hour, iso_utc, local_today, parse_natural_language_date,
    standardize_time_for_backend,
)


class TestTimeNormalization:

    @pytest.mark.parametrize("raw,expected", [
        ("2 pm", "2:00 PM"),
        ("2:00 PM", "2:00 PM"),
        ("10:30a.m.", "10:30 AM"),
        ("1730 hours", "5:30 PM"),
        ("17:30 hours", "5:30 PM"),
        ("0 hours", "12:00 AM"),
    ])
    def test_standardize(self, raw, expected):
        assert standardize_time_for_backend(raw) == expected

    def test_military_passthrough(self):
        assert convert_military_to_12_hour("2:00 PM") == "2:00 PM"
        assert convert_military_to_12_hour("12 hours") == "12:00 PM"


class TestNaturalDates:

    def test_explicit_year(self):
        assert parse_natural_language_date("August 19th", "2024") == "2024-08-19"

    def test_current_year_when_still_ahead(self):
        assert parse_natural_language_date("Aug 19", today=date(2025, 8, 1)) == "2025-08-19"

    def test_rolls_to_next_year_once_passed(self):
        assert parse_natural_language_date("March 5th", today=date(2025, 8, 1)) == "2026-03-05"

    def test_past_dates_kept_when_not_preferring_future(self):
        result = parse_natural_language_date("March 5th", today=date(2025, 8, 1), prefer_future=False)

        assert result == "2025-03-05"

    @pytest.mark.parametrize("raw", ["Smarch 5th", "February 30th", "next tuesday"])
    def test_invalid_dates_raise(self, raw):
        with pytest.raises(ValueError):
            parse_natural_language_date(raw, today=date(2025, 1, 1))


class TestClock:

    def test_iso_utc_suffix(self):
        assert iso_utc(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)) == "2025-01-02T03:04:05Z"

    def test_local_today_returns_date(self):
        assert isinstance(local_today("America/New_York"), date)
