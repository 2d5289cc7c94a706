#!/usr/bin/env python3
"""
Configuration Validation Script for the Wallbox Spot-Price Charger

This script validates the config.yaml file to ensure:
1. Valid YAML syntax
2. Required sections exist
3. Required properties within sections exist
4. Data types are correct (numbers, booleans, strings, etc.)
5. Value ranges are valid and timezones resolve
6. No legacy properties are used

Usage:
    python scripts/validate_config.py [config_file_path]

If no path provided, defaults to config/config.yaml
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytz
import yaml

# ANSI color codes for terminal output
class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    BOLD = '\033[1m'
    END = '\033[0m'

HOUR = {"type": int, "required": True, "min": 0, "max": 23}
TIMEZONE = {"type": str, "required": True, "timezone": True}

# Schema definition for config.yaml; nested sections use dotted names
CONFIG_SCHEMA = {
    "price": {
        "required": True,
        "properties": {
            "max_price": {"type": (int, float), "required": True},
            "vat_rate": {"type": (int, float), "required": True, "min": 0, "max": 1},
            "charge_till_hour_day": HOUR,
            "charge_till_hour_night": HOUR,
            "market_timezone": TIMEZONE,
            "region": {"type": str, "required": False, "choices": ["ee", "fi", "lv", "lt"]},
            "cache_granularity": {"type": str, "required": False, "choices": ["day", "hour"]},
            "request_timeout": {"type": (int, float), "required": False, "min": 1},
            "verify_tls": {"type": bool, "required": False},
            "tariff": {"type": dict, "required": True},
        }
    },
    "price.tariff": {
        "required": True,
        "properties": {
            "day_rate": {"type": (int, float), "required": True, "min": 0},
            "night_rate": {"type": (int, float), "required": True, "min": 0},
            "day_start_hour": HOUR,
            "night_start_hour": HOUR,
            "tariff_timezone": TIMEZONE,
        }
    },
    "wallbox": {
        "required": True,
        "properties": {
            "username": {"type": str, "required": True},
            "password": {"type": str, "required": True},
            "device_id": {"type": (str, int), "required": True},
            "api_url": {"type": str, "required": False},
            "request_timeout": {"type": (int, float), "required": False, "min": 1},
            "verify_tls": {"type": bool, "required": False},
        }
    },
    "storage": {
        "required": False,
        "properties": {
            "backend": {"type": str, "required": False, "choices": ["file", "memory"]},
            "base_dir": {"type": str, "required": False},
        }
    },
    "coordinator": {
        "required": False,
        "properties": {
            "use_lease": {"type": bool, "required": False},
            "lease_ttl_seconds": {"type": int, "required": False, "min": 1},
        }
    },
    "logging": {
        "required": False,
        "properties": {
            "level": {"type": str, "required": False, "choices": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
            "file": {"type": str, "required": False},
        }
    },
}

# Legacy properties from the kebab-case config layout
DEPRECATED_PROPERTIES = {
    "nord-pool": "Renamed: use 'price'",
    "price.max-price": "Renamed: use 'price.max_price'",
    "price.vat": "Renamed: use 'price.vat_rate'",
    "price.charge-till-hour": "Replaced: use 'price.charge_till_hour_day' and 'price.charge_till_hour_night'",
    "price.transmission-cost": "Renamed: use 'price.tariff'",
    "price.tariff.time-offset": "Replaced: use 'price.tariff.tariff_timezone'",
    "wallbox.device-id": "Renamed: use 'wallbox.device_id'",
}


def load_yaml_file(file_path: Path) -> Tuple[Optional[Dict], List[str]]:
    """Load and parse YAML file, return (config, errors)"""
    errors = []
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
            if not isinstance(config, dict):
                errors.append(f"Config file must contain a dictionary, got {type(config).__name__}")
                return None, errors
            return config, errors
    except FileNotFoundError:
        errors.append(f"Config file not found: {file_path}")
        return None, errors
    except yaml.YAMLError as e:
        errors.append(f"YAML syntax error: {e}")
        return None, errors


def validate_type(value: Any, expected_types: tuple, property_path: str) -> Optional[str]:
    """Validate value type, return error message if invalid"""
    if isinstance(value, bool) and bool not in expected_types:
        return f"{property_path}: Expected type {' or '.join(t.__name__ for t in expected_types)}, got bool"
    if not isinstance(value, expected_types):
        expected_names = " or ".join([t.__name__ for t in expected_types])
        return f"{property_path}: Expected type {expected_names}, got {type(value).__name__}"
    return None


def validate_range(value: Any, min_val: Optional[float], max_val: Optional[float], property_path: str) -> Optional[str]:
    """Validate numeric range, return error message if invalid"""
    if min_val is not None and value < min_val:
        return f"{property_path}: Value {value} is below minimum {min_val}"
    if max_val is not None and value > max_val:
        return f"{property_path}: Value {value} exceeds maximum {max_val}"
    return None


def validate_choices(value: Any, choices: List, property_path: str) -> Optional[str]:
    """Validate value is in allowed choices, return error message if invalid"""
    if value not in choices:
        return f"{property_path}: Value '{value}' not in allowed choices: {choices}"
    return None


def validate_timezone(value: str, property_path: str) -> Optional[str]:
    if value not in pytz.all_timezones_set:
        return f"{property_path}: Unknown timezone '{value}'"
    return None


def get_section(config: Dict, section_name: str) -> Any:
    """Look up a possibly nested section by dotted name; None if absent"""
    node: Any = config
    for part in section_name.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def validate_section(config: Dict, section_name: str, schema: Dict, errors: List[str], warnings: List[str]):
    """Validate a config section against its schema"""
    section_schema = schema.get(section_name)
    if not section_schema:
        return

    section = get_section(config, section_name)

    # Check if section is required
    if section is None:
        if section_schema.get("required"):
            errors.append(f"Required section '{section_name}' is missing")
        return

    if not isinstance(section, dict):
        errors.append(f"Section '{section_name}' must be a dictionary, got {type(section).__name__}")
        return

    # Validate properties
    properties = section_schema.get("properties", {})
    for prop_name, prop_schema in properties.items():
        property_path = f"{section_name}.{prop_name}"

        if prop_name not in section:
            if prop_schema.get("required"):
                errors.append(f"Required property '{property_path}' is missing")
            continue

        value = section[prop_name]

        expected_types = prop_schema["type"]
        if not isinstance(expected_types, tuple):
            expected_types = (expected_types,)

        error = validate_type(value, expected_types, property_path)
        if error:
            errors.append(error)
            continue

        # Validate range for numeric types
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            error = validate_range(value, prop_schema.get("min"), prop_schema.get("max"), property_path)
            if error:
                errors.append(error)

        if "choices" in prop_schema:
            error = validate_choices(value, prop_schema["choices"], property_path)
            if error:
                errors.append(error)

        if prop_schema.get("timezone"):
            error = validate_timezone(value, property_path)
            if error:
                errors.append(error)


def check_deprecated_properties(config: Dict, deprecated: Dict, warnings: List[str], path: str = ""):
    """Recursively check for deprecated properties"""
    for key, value in config.items():
        current_path = f"{path}.{key}" if path else key

        if current_path in deprecated:
            warnings.append(f"Deprecated property '{current_path}': {deprecated[current_path]}")

        if isinstance(value, dict):
            check_deprecated_properties(value, deprecated, warnings, current_path)


def validate_custom_rules(config: Dict, errors: List[str], warnings: List[str]):
    """Apply custom validation rules"""
    price = config.get("price")
    if not isinstance(price, dict):
        return

    # Rule 1: the day window must not be empty
    tariff = price.get("tariff")
    if isinstance(tariff, dict) and "day_start_hour" in tariff and "night_start_hour" in tariff:
        if tariff["day_start_hour"] >= tariff["night_start_hour"]:
            warnings.append("price.tariff: day_start_hour >= night_start_hour, the day rate never applies")

    # Rule 2: day and night charge-till hours must differ
    if "charge_till_hour_day" in price and "charge_till_hour_night" in price:
        if price["charge_till_hour_day"] == price["charge_till_hour_night"]:
            warnings.append("price: charge_till_hour_day equals charge_till_hour_night, windows are a full day")
        elif price["charge_till_hour_day"] < price["charge_till_hour_night"]:
            warnings.append("price: charge_till_hour_day < charge_till_hour_night, the day boundary is never used")

    # Rule 3: a non-positive ceiling blocks charging for any positive price
    if isinstance(price.get("max_price"), (int, float)) and price["max_price"] <= 0:
        warnings.append("price.max_price <= 0: charging only starts on zero or negative prices")

    # Rule 4: relaxed TLS
    for section in ("price", "wallbox"):
        if isinstance(config.get(section), dict) and config[section].get("verify_tls") is False:
            warnings.append(f"{section}.verify_tls is disabled")


def print_results(errors: List[str], warnings: List[str], config_path: Path):
    """Print validation results with colors"""
    print(f"\n{Colors.BOLD}Config Validation Report: {config_path}{Colors.END}\n")
    print("=" * 80)

    if errors:
        print(f"\n{Colors.RED}{Colors.BOLD}❌ ERRORS ({len(errors)}):{Colors.END}")
        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")

    if warnings:
        print(f"\n{Colors.YELLOW}{Colors.BOLD}⚠️  WARNINGS ({len(warnings)}):{Colors.END}")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")

    print("\n" + "=" * 80)

    if not errors and not warnings:
        print(f"{Colors.GREEN}{Colors.BOLD}✓ Configuration is valid!{Colors.END}\n")
        return 0
    elif not errors:
        print(f"{Colors.YELLOW}{Colors.BOLD}⚠️  Configuration is valid but has warnings{Colors.END}\n")
        return 0
    else:
        print(f"{Colors.RED}{Colors.BOLD}❌ Configuration has errors and must be fixed{Colors.END}\n")
        return 1


def validate_config(config: Dict) -> Tuple[List[str], List[str]]:
    """Run all checks, return (errors, warnings)"""
    errors: List[str] = []
    warnings: List[str] = []

    for section_name in CONFIG_SCHEMA:
        validate_section(config, section_name, CONFIG_SCHEMA, errors, warnings)

    check_deprecated_properties(config, DEPRECATED_PROPERTIES, warnings)
    validate_custom_rules(config, errors, warnings)
    return errors, warnings


def main():
    """Main validation entry point"""
    if len(sys.argv) > 1:
        config_path = Path(sys.argv[1])
    else:
        script_dir = Path(__file__).parent
        config_path = script_dir.parent / "config" / "config.yaml"

    print(f"\n{Colors.BLUE}Validating config: {config_path}{Colors.END}")

    config, errors = load_yaml_file(config_path)
    if config is None:
        print_results(errors, [], config_path)
        return 1

    errors, warnings = validate_config(config)
    return print_results(errors, warnings, config_path)


if __name__ == "__main__":
    sys.exit(main())
