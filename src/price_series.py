"""
Hourly spot price series as published by the Elering Nord Pool API.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

from charging_errors import PriceNotFound, PriceSourceUnavailable

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def truncate_to_hour(timestamp: int) -> int:
    return timestamp - timestamp % SECONDS_PER_HOUR


@dataclass(frozen=True)
class PricePoint:
    timestamp: int  # Unix seconds, top of the hour
    price: float  # raw spot price per MWh


@dataclass(frozen=True)
class PriceSeries:
    """Ordered price points of one market region."""

    region: str
    points: Tuple[PricePoint, ...] = ()
    _by_timestamp: Dict[int, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        ordered = tuple(sorted(self.points, key=lambda p: p.timestamp))
        object.__setattr__(self, 'points', ordered)
        object.__setattr__(self, '_by_timestamp', {truncate_to_hour(p.timestamp): p.price for p in ordered})

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self.points)

    def price_at(self, timestamp: int) -> float:
        """
        Raw price of the hour containing `timestamp`.

        Raises:
            PriceNotFound: If the hour is not in the series
        """
        hour = truncate_to_hour(timestamp)
        try:
            return self._by_timestamp[hour]
        except KeyError:
            raise PriceNotFound(hour) from None


def parse_price_series(raw: bytes, region: str) -> PriceSeries:
    """
    Parse an Elering response body.

    Expected shape: {"success": true, "data": {"lt": [{"timestamp": ..., "price": ...}]}}

    Raises:
        PriceSourceUnavailable: If the body is not a successful price document
    """
    try:
        document = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise PriceSourceUnavailable(f"Failed to parse price document: {e}") from e

    if not isinstance(document, dict) or not document.get('success', False):
        raise PriceSourceUnavailable("Price document reports no success")

    data = document.get('data')
    if not isinstance(data, dict):
        raise PriceSourceUnavailable("Price document has no data section")

    entries = data.get(region)
    if entries is None:
        logger.warning(f"Price document has no prices for region '{region}'")
        entries = []

    try:
        points = tuple(PricePoint(int(item['timestamp']), float(item['price'])) for item in entries)
    except (KeyError, TypeError, ValueError) as e:
        raise PriceSourceUnavailable(f"Malformed price entry for region '{region}': {e}") from e

    return PriceSeries(region, points)
