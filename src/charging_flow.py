#!/usr/bin/env python3
"""
Charging Flow

Maps (charger status, price status) to one control action and executes it.

| Charger status | Price status  | Action               |
|----------------|---------------|----------------------|
| LockedWaiting  | PriceGood     | set cost, unlock     |
| Paused         | PriceGood     | set cost, resume     |
| Scheduled      | PriceGood     | set cost, resume     |
| Charging       | PriceTooBig   | pause                |
| anything else  |               | no action            |

Nothing outside this table is acted on, so the flow never fights the car,
the owner or a charger in an error state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from charger import ChargerPort, ChargerStatus

logger = logging.getLogger(__name__)


class PriceStatus(Enum):
    PRICE_GOOD = "PriceGood"
    PRICE_TOO_BIG = "PriceTooBig"

    def __str__(self) -> str:
        return self.value


class ChargingAction(Enum):
    SET_COST_THEN_UNLOCK = "SetCostThenUnlock"
    SET_COST_THEN_RESUME = "SetCostThenResume"
    PAUSE = "Pause"
    NO_OP = "NoOp"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DecisionState:
    charger_status: ChargerStatus
    price_status: PriceStatus

    def __str__(self) -> str:
        return f"{self.charger_status}/{self.price_status}"


TRANSITIONS: Mapping[DecisionState, ChargingAction] = MappingProxyType({
    DecisionState(ChargerStatus.LOCKED_WAITING, PriceStatus.PRICE_GOOD): ChargingAction.SET_COST_THEN_UNLOCK,
    DecisionState(ChargerStatus.PAUSED, PriceStatus.PRICE_GOOD): ChargingAction.SET_COST_THEN_RESUME,
    DecisionState(ChargerStatus.SCHEDULED, PriceStatus.PRICE_GOOD): ChargingAction.SET_COST_THEN_RESUME,
    DecisionState(ChargerStatus.CHARGING, PriceStatus.PRICE_TOO_BIG): ChargingAction.PAUSE,
})


def price_status(price: float, desired_price: float) -> PriceStatus:
    if price > desired_price:
        return PriceStatus.PRICE_TOO_BIG
    return PriceStatus.PRICE_GOOD


def new_decision_state(price: float, desired_price: float, charger_status: ChargerStatus) -> DecisionState:
    return DecisionState(charger_status, price_status(price, desired_price))


def decide_action(state: DecisionState) -> ChargingAction:
    return TRANSITIONS.get(state, ChargingAction.NO_OP)


def _action_unlock(charger: ChargerPort, energy_cost: float) -> None:
    logger.info(f"Setting energy cost to {energy_cost:.4f} and performing action unlock")
    charger.set_energy_cost(energy_cost)
    charger.unlock()


def _action_resume(charger: ChargerPort, energy_cost: float) -> None:
    logger.info(f"Setting energy cost to {energy_cost:.4f} and performing action resume")
    charger.set_energy_cost(energy_cost)
    charger.resume()


def _action_pause(charger: ChargerPort, _energy_cost: float) -> None:
    logger.info("Performing action pause")
    charger.pause()


def _action_empty(_charger: ChargerPort, _energy_cost: float) -> None:
    logger.info("Performing empty action")


ACTION_EXECUTORS: Mapping[ChargingAction, Callable[[ChargerPort, float], None]] = MappingProxyType({
    ChargingAction.SET_COST_THEN_UNLOCK: _action_unlock,
    ChargingAction.SET_COST_THEN_RESUME: _action_resume,
    ChargingAction.PAUSE: _action_pause,
    ChargingAction.NO_OP: _action_empty,
})


def execute_action(action: ChargingAction, charger: ChargerPort, energy_cost: float) -> None:
    """
    Run an action against the charger.

    A failed energy cost write aborts before unlock/resume is attempted;
    the ControlActionFailed propagates to the caller.
    """
    ACTION_EXECUTORS[action](charger, energy_cost)
