#!/usr/bin/env python3
"""
Tariff-based transmission pricing for Nord Pool spot prices.

Final Price = Spot Price (per kWh) * (1 + VAT) + Transmission Rate

The spot price feed is quoted per MWh, so it is divided by 1000. The
transmission rate is the day rate inside [day_start_hour, night_start_hour)
on workdays, evaluated in the tariff timezone, and the night rate otherwise.
Saturdays and Sundays always use the night rate.
"""

from dataclasses import dataclass
from datetime import datetime
import logging

from charger_config import PriceConfig, TariffConfig, resolve_timezone

logger = logging.getLogger(__name__)

MWH_TO_KWH = 1000
SATURDAY = 5


@dataclass
class PriceComponents:
    """Breakdown of electricity price components."""
    market_price: float  # per kWh, before VAT
    vat: float  # VAT amount per kWh
    transmission_price: float  # day or night rate
    final_price: float
    is_day_window: bool
    local_time: datetime


def is_day_window(local_time: datetime, tariff: TariffConfig) -> bool:
    """Check whether a tariff-local time falls into the workday day window."""
    workday = local_time.weekday() < SATURDAY
    return workday and tariff.day_start_hour <= local_time.hour < tariff.night_start_hour


class TariffPricingCalculator:
    """Calculate final electricity prices from raw spot prices."""

    def __init__(self, config: PriceConfig):
        self.config = config
        self.tariff = config.tariff
        self.tariff_tz = resolve_timezone(self.tariff.tariff_timezone)

    def calculate_final_price(self, timestamp: int, raw_price: float) -> PriceComponents:
        """
        Calculate final electricity price with all components.

        Args:
            timestamp: Unix seconds of the priced hour
            raw_price: Spot price per MWh

        Returns:
            PriceComponents with detailed breakdown
        """
        local_time = datetime.fromtimestamp(timestamp, self.tariff_tz)
        day_window = is_day_window(local_time, self.tariff)

        market_price = raw_price / MWH_TO_KWH
        vat = market_price * self.config.vat_rate
        transmission_price = self.tariff.day_rate if day_window else self.tariff.night_rate

        components = PriceComponents(
            market_price=market_price,
            vat=vat,
            transmission_price=transmission_price,
            final_price=market_price * (1 + self.config.vat_rate) + transmission_price,
            is_day_window=day_window,
            local_time=local_time,
        )
        logger.debug(
            f"{local_time.isoformat()}: spot={raw_price:.2f}/MWh, "
            f"{'day' if day_window else 'night'} rate={transmission_price}, final={components.final_price:.4f}"
        )
        return components


def calculate_price(timestamp: int, raw_price: float, config: PriceConfig) -> float:
    """
    Convert a raw spot price into the final tariff and VAT adjusted price.

    Raises:
        ConfigurationError: If the tariff timezone cannot be resolved
    """
    return TariffPricingCalculator(config).calculate_final_price(timestamp, raw_price).final_price
