#!/usr/bin/env python3
"""
Price Window Analyzer

Finds the cheapest final price between now and the next charge-till
boundary and turns it into the acceptance threshold for charging.

The boundary is `charge_till_hour_day` when the current market-local hour is
in (charge_till_hour_night, charge_till_hour_day], otherwise
`charge_till_hour_night`. The boundary hour itself is never part of the window,
and a boundary hour skipped by a daylight saving change still ends it.
"""

import logging
import sys
from datetime import datetime

from charger_config import PriceConfig, resolve_timezone
from charging_errors import PriceNotFound
from price_series import PriceSeries, SECONDS_PER_HOUR
from tariff_pricing import TariffPricingCalculator

logger = logging.getLogger(__name__)

NO_PRICE = sys.float_info.max


def charge_till_hour(config: PriceConfig, local_hour: int) -> int:
    """Boundary hour governing a window that starts at `local_hour`."""
    if config.charge_till_hour_night < local_hour <= config.charge_till_hour_day:
        return config.charge_till_hour_day
    return config.charge_till_hour_night


def _passes_hour(previous_hour: int, hour: int, target_hour: int) -> bool:
    """Whether stepping from previous_hour to hour reaches or skips target_hour (DST gaps skip one)."""
    return 0 < (target_hour - previous_hour) % 24 <= (hour - previous_hour) % 24


def find_price(series: PriceSeries, timestamp: int) -> float:
    """
    Raw spot price of the hour containing `timestamp`.

    Raises:
        PriceNotFound: If the hour is missing from the series
    """
    return series.price_at(timestamp)


def find_min_price(config: PriceConfig, series: PriceSeries, from_timestamp: int) -> float:
    """
    Minimum final price from `from_timestamp` up to the charge-till boundary.

    A missing hour ends the scan; the minimum collected so far is returned.
    Returns NO_PRICE when no hour was scanned.
    """
    market_tz = resolve_timezone(config.market_timezone)
    calculator = TariffPricingCalculator(config)

    hour = datetime.fromtimestamp(from_timestamp, market_tz).hour
    till_hour = charge_till_hour(config, hour)
    min_price = NO_PRICE
    timestamp = from_timestamp

    while hour != till_hour:
        try:
            raw_price = find_price(series, timestamp)
        except PriceNotFound as e:
            logger.debug(f"Stopping window scan: {e}")
            break
        price = calculator.calculate_final_price(timestamp, raw_price).final_price
        min_price = min(min_price, price)

        timestamp += SECONDS_PER_HOUR
        previous_hour, hour = hour, datetime.fromtimestamp(timestamp, market_tz).hour
        if _passes_hour(previous_hour, hour, till_hour):
            break

    if min_price == NO_PRICE:
        logger.info(f"No prices before charge-till hour {till_hour:02d}:00")
    else:
        logger.info(f"Minimum price until {till_hour:02d}:00 is {min_price:.4f}")
    return min_price


def resolve_desired_price(config: PriceConfig, min_window_price: float) -> float:
    """Acceptance threshold: the cheapest window price, clamped to max_price."""
    if min_window_price > config.max_price:
        return config.max_price
    return min_window_price
