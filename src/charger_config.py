"""
Configuration Models

Data structures for price, tariff, Wallbox, storage and coordinator
configuration, loaded from the YAML config file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import pytz
import yaml

from charging_errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PRICE_API_URL = "https://dashboard.elering.ee/api/nps/price"
DEFAULT_WALLBOX_API_URL = "https://api.wall-box.com"
CACHE_GRANULARITIES = ("day", "hour")


def resolve_timezone(name: str):
    """
    Resolve a timezone identifier.

    Raises:
        ConfigurationError: If the identifier is unknown
    """
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigurationError(f"Unknown timezone: {name}") from e


def _valid_hour(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 23


@dataclass
class TariffConfig:
    """Transmission tariff: day rate inside [day_start_hour, night_start_hour) on workdays."""

    day_rate: float
    night_rate: float
    day_start_hour: int = 7
    night_start_hour: int = 23
    tariff_timezone: str = "UTC"

    @classmethod
    def from_yaml_config(cls, config_dict: Dict[str, Any]) -> 'TariffConfig':
        return cls(
            day_rate=float(config_dict.get('day_rate', 0.0)),
            night_rate=float(config_dict.get('night_rate', 0.0)),
            day_start_hour=config_dict.get('day_start_hour', 7),
            night_start_hour=config_dict.get('night_start_hour', 23),
            tariff_timezone=config_dict.get('tariff_timezone', 'UTC'),
        )

    def validate(self) -> Tuple[bool, Optional[str]]:
        if not _valid_hour(self.day_start_hour):
            return False, f"tariff.day_start_hour must be within 0-23, got {self.day_start_hour}"
        if not _valid_hour(self.night_start_hour):
            return False, f"tariff.night_start_hour must be within 0-23, got {self.night_start_hour}"
        if self.tariff_timezone not in pytz.all_timezones_set:
            return False, f"tariff.tariff_timezone is unknown: {self.tariff_timezone}"
        return True, None


@dataclass
class PriceConfig:
    """
    Price decision configuration.

    max_price is the hard ceiling for the acceptance threshold; the
    charge-till hours bound the minimum-price lookahead window.
    """

    max_price: float
    vat_rate: float
    charge_till_hour_day: int
    charge_till_hour_night: int
    market_timezone: str
    tariff: TariffConfig
    region: str = "lt"
    api_url: str = DEFAULT_PRICE_API_URL
    cache_granularity: str = "day"
    request_timeout: float = 30.0
    verify_tls: bool = True

    @classmethod
    def from_yaml_config(cls, config_dict: Dict[str, Any]) -> 'PriceConfig':
        return cls(
            max_price=float(config_dict.get('max_price', 0.0)),
            vat_rate=float(config_dict.get('vat_rate', 0.0)),
            charge_till_hour_day=config_dict.get('charge_till_hour_day', 17),
            charge_till_hour_night=config_dict.get('charge_till_hour_night', 7),
            market_timezone=config_dict.get('market_timezone', 'UTC'),
            tariff=TariffConfig.from_yaml_config(config_dict.get('tariff', {}) or {}),
            region=str(config_dict.get('region', 'lt')).lower(),
            api_url=config_dict.get('api_url', DEFAULT_PRICE_API_URL),
            cache_granularity=config_dict.get('cache_granularity', 'day'),
            request_timeout=float(config_dict.get('request_timeout', 30.0)),
            verify_tls=bool(config_dict.get('verify_tls', True)),
        )

    def validate(self) -> Tuple[bool, Optional[str]]:
        if not _valid_hour(self.charge_till_hour_day):
            return False, f"price.charge_till_hour_day must be within 0-23, got {self.charge_till_hour_day}"
        if not _valid_hour(self.charge_till_hour_night):
            return False, f"price.charge_till_hour_night must be within 0-23, got {self.charge_till_hour_night}"
        if self.market_timezone not in pytz.all_timezones_set:
            return False, f"price.market_timezone is unknown: {self.market_timezone}"
        if self.cache_granularity not in CACHE_GRANULARITIES:
            return False, f"price.cache_granularity must be one of {CACHE_GRANULARITIES}"
        if self.vat_rate < 0:
            return False, "price.vat_rate must not be negative"
        return self.tariff.validate()


@dataclass
class WallboxConfig:
    """Wallbox account and device."""

    username: str
    password: str
    device_id: str
    api_url: str = DEFAULT_WALLBOX_API_URL
    request_timeout: float = 30.0
    verify_tls: bool = True

    @classmethod
    def from_yaml_config(cls, config_dict: Dict[str, Any]) -> 'WallboxConfig':
        return cls(
            username=config_dict.get('username', ''),
            password=config_dict.get('password', ''),
            device_id=str(config_dict.get('device_id', '')),
            api_url=config_dict.get('api_url', DEFAULT_WALLBOX_API_URL).rstrip('/'),
            request_timeout=float(config_dict.get('request_timeout', 30.0)),
            verify_tls=bool(config_dict.get('verify_tls', True)),
        )

    def validate(self) -> Tuple[bool, Optional[str]]:
        if not self.username or not self.password:
            return False, "wallbox.username and wallbox.password must be specified"
        if not self.device_id:
            return False, "wallbox.device_id must be specified"
        return True, None


@dataclass
class CoordinatorConfig:
    use_lease: bool = False
    lease_ttl_seconds: int = 300

    @classmethod
    def from_yaml_config(cls, config_dict: Dict[str, Any]) -> 'CoordinatorConfig':
        return cls(
            use_lease=bool(config_dict.get('use_lease', False)),
            lease_ttl_seconds=int(config_dict.get('lease_ttl_seconds', 300)),
        )


@dataclass
class AppConfig:
    """Whole application configuration."""

    price: PriceConfig
    wallbox: WallboxConfig
    storage: Dict[str, Any] = field(default_factory=dict)
    coordinator: CoordinatorConfig = field(default_factory=CoordinatorConfig)
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml_config(cls, config_dict: Dict[str, Any]) -> 'AppConfig':
        return cls(
            price=PriceConfig.from_yaml_config(config_dict.get('price', {}) or {}),
            wallbox=WallboxConfig.from_yaml_config(config_dict.get('wallbox', {}) or {}),
            storage=config_dict.get('storage', {}) or {},
            coordinator=CoordinatorConfig.from_yaml_config(config_dict.get('coordinator', {}) or {}),
            logging=config_dict.get('logging', {}) or {},
        )

    def validate(self) -> Tuple[bool, Optional[str]]:
        for section in (self.price, self.wallbox):
            is_valid, error_msg = section.validate()
            if not is_valid:
                return is_valid, error_msg
        return True, None


def load_config(config_path: str) -> AppConfig:
    """
    Load and validate the YAML configuration file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = Path(config_path)
    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    config = AppConfig.from_yaml_config(raw)
    is_valid, error_msg = config.validate()
    if not is_valid:
        raise ConfigurationError(f"Invalid configuration: {error_msg}")

    logger.info(f"Configuration loaded from {path}")
    return config
