#!/usr/bin/env python3
"""
Price Series Cache

Fetch-or-read access to hourly Nord Pool prices keyed by calendar date (or
date+hour). Cached blobs hold the exact raw response body of the price API
and are parsed after every read.

Only a missing entry triggers a remote fetch, and a fetched document is cached
only once it parses. Store faults and corrupt cached documents propagate so
infrastructure problems are not masked by silently re-fetching and overwriting.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from blob_storage import BlobStore
from charger_config import PriceConfig, resolve_timezone
from charging_errors import BlobNotFound
from elering_price_source import EleringPriceSource
from price_series import PriceSeries, parse_price_series

logger = logging.getLogger(__name__)


def prices_key(day: date, hour: Optional[int] = None) -> str:
    """Deterministic blob key for a date, or a date and hour."""
    if hour is None:
        return f"nord_pool_{day.isoformat()}.json"
    return f"nord_pool_{day.isoformat()}_{hour:02d}.json"


class PriceSeriesCache:
    """Resolves price series through the blob store, falling back to the price API."""

    def __init__(self, config: PriceConfig, store: BlobStore, source: EleringPriceSource):
        self.config = config
        self.store = store
        self.source = source
        self.market_tz = resolve_timezone(config.market_timezone)

    def get_series(self, day: date, hour: Optional[int] = None) -> PriceSeries:
        """
        Get the price series for a calendar date (or a date and starting hour).

        Raises:
            PriceSourceUnavailable: If the series can neither be read nor fetched,
                or the document fails to parse
            BlobStoreError: On store faults other than a missing entry
        """
        key = prices_key(day, hour)
        try:
            raw = self.store.get(key)
        except BlobNotFound:
            logger.info(f"Prices {key} not cached, fetching")
            raw = self._fetch(day, hour)
            # Only documents that parse are cached
            series = parse_price_series(raw, self.config.region)
            self.store.put(key, raw)
        else:
            logger.debug(f"Using cached prices {key}")
            series = parse_price_series(raw, self.config.region)

        logger.info(f"Loaded {len(series)} prices for region '{series.region}' from {key}")
        return series

    def get_series_for(self, timestamp: int) -> PriceSeries:
        """Series covering `timestamp`, per the configured cache granularity."""
        local_time = datetime.fromtimestamp(timestamp, self.market_tz)
        if self.config.cache_granularity == 'hour':
            return self.get_series(local_time.date(), local_time.hour)
        return self.get_series(local_time.date())

    def _fetch(self, day: date, hour: Optional[int]) -> bytes:
        midnight = datetime(day.year, day.month, day.day)
        if hour is None:
            start = self.market_tz.localize(midnight)
            end = self.market_tz.localize(midnight + timedelta(days=1))
        else:
            start = self.market_tz.localize(midnight + timedelta(hours=hour))
            end = self.market_tz.normalize(start + timedelta(hours=24))
        return self.source.fetch_day(start, end)
