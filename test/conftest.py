"""
Shared fixtures for the charging engine tests.

Timestamps are built in Europe/Vilnius (market timezone) while the tariff is
evaluated in Etc/GMT-2, so a summer timestamp is one hour earlier on the
tariff clock than on the market clock.
"""

from pathlib import Path
import sys

# Ensure project `src/` is on sys.path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import json
from datetime import datetime

import pytest
import pytz

from charger_config import PriceConfig, TariffConfig

VILNIUS = pytz.timezone('Europe/Vilnius')


def vilnius_ts(year, month, day, hour, minute=0) -> int:
	"""Unix seconds of a Europe/Vilnius wall clock time."""
	return int(VILNIUS.localize(datetime(year, month, day, hour, minute)).timestamp())


def price_document(prices, region='lt', success=True) -> bytes:
	"""Raw Elering response body for (timestamp, price) pairs."""
	return json.dumps({
		'success': success,
		'data': {region: [{'timestamp': ts, 'price': price} for ts, price in prices]},
	}).encode()


def make_price_config(**overrides) -> PriceConfig:
	tariff = TariffConfig(
		day_rate=0.1,
		night_rate=0.05,
		day_start_hour=7,
		night_start_hour=23,
		tariff_timezone=overrides.pop('tariff_timezone', 'Etc/GMT-2'),
	)
	values = dict(
		max_price=0.25,
		vat_rate=0.0,
		charge_till_hour_day=20,
		charge_till_hour_night=8,
		market_timezone='Europe/Vilnius',
		tariff=tariff,
	)
	values.update(overrides)
	return PriceConfig(**values)


@pytest.fixture
def price_config():
	"""Tariff {day 0.1, night 0.05, 07-23}, VAT 0, charge till 08:00 / 20:00."""
	return make_price_config()
