#!/usr/bin/env python3
"""
Elering Price Source
Fetches Nord Pool spot prices from the Elering dashboard API.

Response shape:
    {"success": true, "data": {"ee": [...], "fi": [...], "lv": [...], "lt": [...]}}
where every entry is {"timestamp": <unix seconds>, "price": <per MWh>}.
"""

import logging
from datetime import datetime

import requests

from charger_config import DEFAULT_PRICE_API_URL
from charging_errors import PriceSourceUnavailable

logger = logging.getLogger(__name__)


class EleringPriceSource:
    """Remote spot price feed. Returns raw response bytes for caching."""

    def __init__(self, session: requests.Session, api_url: str = DEFAULT_PRICE_API_URL,
                 timeout: float = 30.0, verify_tls: bool = True):
        self.session = session
        self.api_url = api_url
        self.timeout = timeout
        self.verify_tls = verify_tls

    def fetch_day(self, start: datetime, end: datetime) -> bytes:
        """
        Fetch prices for [start, end).

        Args:
            start: Timezone-aware start of the span
            end: Timezone-aware end of the span

        Returns:
            Raw response body

        Raises:
            PriceSourceUnavailable: On transport errors or non-success responses
        """
        params = {'start': start.isoformat(), 'end': end.isoformat()}
        logger.info(f"Fetching Nord Pool prices {params['start']} - {params['end']}")
        try:
            response = self.session.get(self.api_url, params=params, timeout=self.timeout, verify=self.verify_tls)
        except requests.RequestException as e:
            raise PriceSourceUnavailable(f"Failed to fetch prices: {e}") from e

        if response.status_code != requests.codes.ok:
            raise PriceSourceUnavailable(
                f"Price API returned invalid response {response.status_code} {response.text}"
            )

        logger.debug(f"Fetched {len(response.content)} bytes of price data")
        return response.content
