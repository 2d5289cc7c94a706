#!/usr/bin/env python3
"""
Charging Coordinator for the Wallbox Spot-Price Charger
Runs one evaluation cycle per invocation:

- Resolve today's Nord Pool prices (blob cache, Elering API on a miss)
- Compute the current final price and the cheapest price until the
  charge-till boundary
- Query the charger status and pick one control action
- Execute the action (unless running with --dry-run)

Meant to be triggered by a periodic scheduler (cron, systemd timer).
"""

import argparse
import logging
import sys
import time
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

# Add current directory to path for imports
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from blob_storage import BlobStore, StorageFactory
from charger import ChargerPort, ChargerStatus, WallboxChargerAdapter
from charger_config import AppConfig, load_config
from charging_errors import ChargingEngineError, LeaseUnavailable
from charging_flow import ChargingAction, PriceStatus, decide_action, execute_action, new_decision_state
from elering_price_source import EleringPriceSource
from price_series_cache import PriceSeriesCache
from price_window_analyzer import find_min_price, find_price, resolve_desired_price
from tariff_pricing import calculate_price

logger = logging.getLogger(__name__)

LEASE_KEY = "charging_cycle.lock"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class CycleResult:
    """Outcome of one evaluation cycle."""
    charger_status: ChargerStatus
    current_price: float
    min_price: float
    desired_price: float
    price_status: PriceStatus
    action: ChargingAction
    executed: bool


class ChargingCoordinator:
    """Read prices, decide, act. One cycle per call to run_cycle()."""

    def __init__(self, config: AppConfig, charger: ChargerPort, price_cache: PriceSeriesCache,
                 store: Optional[BlobStore] = None, clock: Callable[[], float] = time.time):
        self.config = config
        self.charger = charger
        self.price_cache = price_cache
        self.store = store
        self.clock = clock

    def run_cycle(self, dry_run: bool = False) -> CycleResult:
        """
        Evaluate prices and charger state once and apply the chosen action.

        Raises:
            ChargingEngineError: Any collaborator failure aborts the cycle
        """
        coordinator_config = self.config.coordinator
        if coordinator_config.use_lease and self.store is not None:
            guard = self.store.lease(LEASE_KEY, coordinator_config.lease_ttl_seconds)
        else:
            guard = nullcontext()

        with guard:
            return self._evaluate(dry_run)

    def _evaluate(self, dry_run: bool) -> CycleResult:
        price_config = self.config.price
        now = int(self.clock())

        series = self.price_cache.get_series_for(now)
        current_price = calculate_price(now, find_price(series, now), price_config)
        min_price = find_min_price(price_config, series, now)
        desired_price = resolve_desired_price(price_config, min_price)

        status = self.charger.get_status()
        state = new_decision_state(current_price, desired_price, status)
        action = decide_action(state)
        logger.info(
            f"Flow for state {state}, price {current_price:.4f}, desired price {desired_price:.4f}: {action}"
        )

        if dry_run:
            logger.info(f"Dry run, not performing {action}")
        else:
            execute_action(action, self.charger, current_price)

        return CycleResult(
            charger_status=status,
            current_price=current_price,
            min_price=min_price,
            desired_price=desired_price,
            price_status=state.price_status,
            action=action,
            executed=not dry_run,
        )


def build_coordinator(config: AppConfig, session: requests.Session) -> ChargingCoordinator:
    """Wire the collaborators from configuration."""
    store = StorageFactory.create_storage(config.storage)
    source = EleringPriceSource(
        session,
        api_url=config.price.api_url,
        timeout=config.price.request_timeout,
        verify_tls=config.price.verify_tls,
    )
    price_cache = PriceSeriesCache(config.price, store, source)
    charger = WallboxChargerAdapter(config.wallbox, session, store)
    return ChargingCoordinator(config, charger, price_cache, store)


def setup_logging(config: AppConfig, level_override: Optional[str] = None) -> None:
    """Log to stderr and to the configured log file."""
    logging_config = config.logging
    log_file = Path(logging_config.get('file', 'logs/wallbox_charger.log'))
    log_file.parent.mkdir(parents=True, exist_ok=True)

    level = (level_override or logging_config.get('level', 'INFO')).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Unlock, resume or pause a Wallbox charger based on Nord Pool spot prices',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run one decision cycle
  python charging_coordinator.py

  # Run with custom config
  python charging_coordinator.py --config my_config.yaml

  # Decide and log, but do not touch the charger
  python charging_coordinator.py --dry-run
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config/config.yaml',
        help='Configuration file path (default: config/config.yaml)'
    )

    parser.add_argument(
        '--dry-run', '-d',
        action='store_true',
        help='Evaluate prices and charger status without performing the action'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Override the configured log level'
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main function"""
    args = parse_arguments(argv)

    try:
        config = load_config(args.config)
    except ChargingEngineError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(f"Fatal error: {e}")
        return 1

    setup_logging(config, args.log_level)

    with requests.Session() as session:
        try:
            coordinator = build_coordinator(config, session)
            coordinator.run_cycle(dry_run=args.dry_run)
        except LeaseUnavailable as e:
            logger.warning(f"Skipping cycle, another run is in progress: {e}")
            return 0
        except ChargingEngineError as e:
            logger.error(f"Fatal error: {e}")
            return 1
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
