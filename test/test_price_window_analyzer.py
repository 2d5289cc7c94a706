#!/usr/bin/env python3
"""
Tests for the minimum price window and desired price threshold.

Market timezone Europe/Vilnius (UTC+3 in summer), tariff clock Etc/GMT-2.
Charge till 08:00 (night) and 20:00 (day).
"""

import pytest

from charging_errors import PriceNotFound
from price_series import PricePoint, PriceSeries
from price_window_analyzer import (
    NO_PRICE,
    charge_till_hour,
    find_min_price,
    find_price,
    resolve_desired_price,
)
from conftest import make_price_config, vilnius_ts

ONE_AM = vilnius_ts(2023, 8, 1, 1)  # Tuesday, 1690840800
HOUR = 3600


def series_of(*prices, start=ONE_AM):
    """Consecutive hourly prices starting at `start`; None leaves a gap."""
    points = [PricePoint(start + i * HOUR, p) for i, p in enumerate(prices) if p is not None]
    return PriceSeries('lt', tuple(points))


class TestFindMinPrice:

    def test_empty_series_returns_sentinel(self, price_config):
        assert find_min_price(price_config, series_of(), ONE_AM) == NO_PRICE

    def test_single_price(self, price_config):
        assert ONE_AM == 1690840800
        assert find_min_price(price_config, series_of(100), ONE_AM) == pytest.approx(0.15)

    @pytest.mark.parametrize("prices", [
        (100, 200),
        (200, 100),
        (200, 100, 200),
    ])
    def test_cheapest_hour_wins(self, price_config, prices):
        assert find_min_price(price_config, series_of(*prices), ONE_AM) == pytest.approx(0.15)

    def test_equal_prices_give_same_adjusted_value(self, price_config):
        series = series_of(*([50] * 6))

        assert find_min_price(price_config, series, ONE_AM) == pytest.approx(0.10)
        assert find_min_price(price_config, series, ONE_AM + 3 * HOUR) == pytest.approx(0.10)

    def test_boundary_hour_is_excluded(self, price_config):
        """06:00 and 07:00 are scanned; the cheap 08:00 hour is not"""
        start = vilnius_ts(2023, 8, 1, 6)
        series = series_of(200, 100, 10, start=start)

        assert find_min_price(price_config, series, start) == pytest.approx(0.15)

    def test_starting_on_boundary_returns_sentinel(self, price_config):
        start = vilnius_ts(2023, 8, 1, 8)
        series = series_of(10, 10, 10, start=start)

        assert find_min_price(price_config, series, start) == NO_PRICE

    def test_day_boundary_governs_daytime_windows(self, price_config):
        """From 10:00 the window ends before 20:00"""
        start = vilnius_ts(2023, 8, 1, 10)
        prices = [500] * 10 + [0, 0]  # 10:00-19:00 expensive, 20:00 and 21:00 free
        series = series_of(*prices, start=start)

        assert find_min_price(price_config, series, start) == pytest.approx(0.5 + 0.1)

    def test_missing_hour_stops_scan(self, price_config):
        series = series_of(300, None, 10)

        assert find_min_price(price_config, series, ONE_AM) == pytest.approx(0.3 + 0.05)

    def test_window_crosses_midnight(self, price_config):
        """A 22:00 start runs through the night until 08:00"""
        start = vilnius_ts(2023, 8, 1, 22)
        prices = [400, 300, 20, 500, 500, 500, 500, 500, 500, 500, 0]
        series = series_of(*prices, start=start)

        # 00:00 Vilnius is 23:00 Tuesday on the tariff clock, night rate
        assert find_min_price(price_config, series, start) == pytest.approx(0.02 + 0.05)

    def test_boundary_skipped_by_dst_gap_ends_window(self):
        """Vilnius jumps from 03:00 to 04:00 on 2024-03-31, so a 03:00 boundary never occurs"""
        config = make_price_config(charge_till_hour_night=3)
        start = vilnius_ts(2024, 3, 31, 0)
        series = PriceSeries('lt', (
            PricePoint(start, 500),
            PricePoint(start + HOUR, 500),
            PricePoint(start + 2 * HOUR, 500),
            PricePoint(vilnius_ts(2024, 3, 31, 4), 0),
            PricePoint(vilnius_ts(2024, 3, 31, 5), 0),
        ))

        assert vilnius_ts(2024, 3, 31, 4) == start + 3 * HOUR
        # Sunday, night rate
        assert find_min_price(config, series, start) == pytest.approx(0.5 + 0.05)

    def test_repeated_hour_on_dst_end_is_scanned(self):
        """Vilnius repeats 03:00 on 2023-10-29; both hours belong to a window ending at 05:00"""
        config = make_price_config(charge_till_hour_night=5)
        start = vilnius_ts(2023, 10, 29, 2)
        series = series_of(500, 500, 20, 500, 0, start=start)  # 02, 03, 03 (again), 04, 05

        assert find_min_price(config, series, start) == pytest.approx(0.02 + 0.05)

    def test_scan_keeps_minutes_of_start(self, price_config):
        """Lookups truncate to the hour, so a mid-hour start still finds its hour"""
        assert find_min_price(price_config, series_of(100), ONE_AM + 1800) == pytest.approx(0.15)


class TestChargeTillHour:

    @pytest.mark.parametrize("local_hour,expected", [
        (0, 7),
        (7, 7),
        (8, 17),
        (17, 17),
        (18, 7),
        (23, 7),
    ])
    def test_boundary_selection(self, local_hour, expected):
        config = make_price_config(charge_till_hour_day=17, charge_till_hour_night=7)

        assert charge_till_hour(config, local_hour) == expected


class TestFindPrice:

    def test_truncates_to_hour(self):
        assert find_price(series_of(42), ONE_AM + 3599) == 42

    def test_missing_hour_raises(self):
        with pytest.raises(PriceNotFound) as exc_info:
            find_price(series_of(42), ONE_AM + HOUR)

        assert exc_info.value.timestamp == ONE_AM + HOUR


class TestResolveDesiredPrice:

    def test_clamps_to_max_price(self, price_config):
        assert resolve_desired_price(price_config, 0.30) == 0.25

    def test_uses_cheaper_window_price(self, price_config):
        assert resolve_desired_price(price_config, 0.12) == 0.12

    def test_equality_returns_window_price(self, price_config):
        assert resolve_desired_price(price_config, 0.25) == 0.25

    def test_sentinel_falls_back_to_max_price(self, price_config):
        assert resolve_desired_price(price_config, NO_PRICE) == 0.25
