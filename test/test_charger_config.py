#!/usr/bin/env python3
"""
Tests for YAML configuration loading and validation.
"""

from pathlib import Path

import pytest
import yaml

from charger_config import (
    DEFAULT_PRICE_API_URL,
    DEFAULT_WALLBOX_API_URL,
    AppConfig,
    TariffConfig,
    load_config,
    resolve_timezone,
)
from charging_errors import ConfigurationError
from conftest import make_price_config

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config" / "config.example.yaml"


def write_config(tmp_path, data) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def example_dict():
    with open(EXAMPLE_CONFIG) as f:
        return yaml.safe_load(f)


class TestLoadConfig:

    def test_example_config_loads(self):
        config = load_config(str(EXAMPLE_CONFIG))

        assert isinstance(config, AppConfig)
        assert config.price.max_price == 0.25
        assert config.price.vat_rate == 0.21
        assert config.price.tariff.tariff_timezone == "Etc/GMT-2"
        assert config.price.api_url == DEFAULT_PRICE_API_URL
        assert config.wallbox.device_id == "12345"
        assert config.wallbox.api_url == DEFAULT_WALLBOX_API_URL
        assert config.storage == {'backend': 'file', 'base_dir': 'out/cache'}
        assert config.coordinator.use_lease is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("price: [unclosed")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_document_must_be_mapping(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(write_config(tmp_path, ["price"]))

    def test_unknown_market_timezone(self, tmp_path):
        data = example_dict()
        data['price']['market_timezone'] = "Mars/Olympus"

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(write_config(tmp_path, data))

        assert "market_timezone" in str(exc_info.value)

    def test_missing_credentials(self, tmp_path):
        data = example_dict()
        del data['wallbox']['password']

        with pytest.raises(ConfigurationError):
            load_config(write_config(tmp_path, data))

    def test_region_is_normalised_and_url_trimmed(self, tmp_path):
        data = example_dict()
        data['price']['region'] = "EE"
        data['wallbox']['api_url'] = "https://wallbox.test/"

        config = load_config(write_config(tmp_path, data))

        assert config.price.region == "ee"
        assert config.wallbox.api_url == "https://wallbox.test"


class TestValidate:

    @pytest.mark.parametrize("field", ["charge_till_hour_day", "charge_till_hour_night"])
    @pytest.mark.parametrize("value", [-1, 24, True])
    def test_charge_till_hours_out_of_range(self, field, value):
        is_valid, error_msg = make_price_config(**{field: value}).validate()

        assert not is_valid
        assert field in error_msg

    def test_unknown_cache_granularity(self):
        is_valid, _ = make_price_config(cache_granularity="week").validate()

        assert not is_valid

    def test_tariff_hours_out_of_range(self):
        tariff = TariffConfig(day_rate=0.1, night_rate=0.05, day_start_hour=25)

        assert tariff.validate() == (False, "tariff.day_start_hour must be within 0-23, got 25")

    def test_default_config_is_valid(self, price_config):
        assert price_config.validate() == (True, None)


def test_resolve_timezone():
    assert resolve_timezone("Europe/Vilnius").zone == "Europe/Vilnius"
    with pytest.raises(ConfigurationError):
        resolve_timezone("Nowhere/Special")
