"""
Tests for the daily schedule → cron conversion.
"""

import pytest

from connectors.schedule import (
    HOUR_ITEMS,
    MINUTE_ITEMS,
    TIMEZONE_ITEMS,
    describe_schedule,
    is_valid_timezone,
    parse_cron,
    to_cron,
)


class TestToCron:
    def test_every_displayed_hour_and_minute(self):
        for hour, _ in HOUR_ITEMS:
            for minute, _ in MINUTE_ITEMS:
                assert to_cron(hour, minute) == f"{minute} {hour} * * *"

    def test_midnight(self):
        assert to_cron(0, 0) == "0 0 * * *"

    def test_minutes_are_not_zero_padded(self):
        assert to_cron(9, 5) == "5 9 * * *"

    @pytest.mark.parametrize("hour, minute", [(24, 0), (-1, 0), (0, 60), (0, -5)])
    def test_out_of_range_raises(self, hour, minute):
        with pytest.raises(ValueError, match="out of range"):
            to_cron(hour, minute)


class TestParseCron:
    def test_inverse_of_to_cron(self):
        assert parse_cron(to_cron(23, 45)) == (23, 45)

    @pytest.mark.parametrize(
        "expression",
        ["", "0 0 * *", "0 0 1 * *", "*/5 * * * *", "a b * * *", "0 24 * * *"],
    )
    def test_rejects_non_daily(self, expression):
        with pytest.raises(ValueError):
            parse_cron(expression)


class TestDisplayItems:
    def test_ranges(self):
        assert [h for h, _ in HOUR_ITEMS] == list(range(24))
        assert [m for m, _ in MINUTE_ITEMS] == list(range(60))
        assert HOUR_ITEMS[7][1] == "07"

    def test_timezones_start_with_utc_and_are_valid(self):
        assert TIMEZONE_ITEMS[0] == "UTC"
        assert all(is_valid_timezone(tz) for tz in TIMEZONE_ITEMS)

    def test_unknown_timezone(self):
        assert not is_valid_timezone("Mars/Olympus_Mons")
        assert not is_valid_timezone("")

    def test_describe_schedule(self):
        assert describe_schedule("0 6 * * *", "Europe/Berlin") == "Europe/Berlin, 0 6 * * *"
