"""
Charger Status Model

Vendor-agnostic charger states and the Wallbox status code mapping.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class ChargerStatus(Enum):
    """Charger operating states."""

    UNKNOWN = "Unknown"
    WAITING = "Waiting"
    WAITING_FOR_CAR = "WaitingForCar"
    CHARGING = "Charging"
    READY = "Ready"
    PAUSED = "Paused"
    SCHEDULED = "Scheduled"
    DISCHARGING = "Discharging"
    ERROR = "Error"
    DISCONNECTED = "Disconnected"
    LOCKED = "Locked"
    LOCKED_WAITING = "LockedWaiting"
    UPDATING = "Updating"

    def __str__(self) -> str:
        return self.value


WALLBOX_STATUS_CODES: Mapping[int, ChargerStatus] = MappingProxyType({
    164: ChargerStatus.WAITING,
    180: ChargerStatus.WAITING,
    183: ChargerStatus.WAITING,
    184: ChargerStatus.WAITING,
    185: ChargerStatus.WAITING,
    186: ChargerStatus.WAITING,
    187: ChargerStatus.WAITING,
    188: ChargerStatus.WAITING,
    189: ChargerStatus.WAITING,
    181: ChargerStatus.WAITING_FOR_CAR,
    193: ChargerStatus.CHARGING,
    194: ChargerStatus.CHARGING,
    195: ChargerStatus.CHARGING,
    161: ChargerStatus.READY,
    162: ChargerStatus.READY,
    178: ChargerStatus.PAUSED,
    182: ChargerStatus.PAUSED,
    177: ChargerStatus.SCHEDULED,
    179: ChargerStatus.SCHEDULED,
    196: ChargerStatus.DISCHARGING,
    14: ChargerStatus.ERROR,
    15: ChargerStatus.ERROR,
    0: ChargerStatus.DISCONNECTED,
    163: ChargerStatus.DISCONNECTED,
    209: ChargerStatus.LOCKED,
    210: ChargerStatus.LOCKED_WAITING,
    165: ChargerStatus.LOCKED,
    166: ChargerStatus.UPDATING,
})


def map_to_status(code: int) -> ChargerStatus:
    """Map a Wallbox status code; unmapped codes are UNKNOWN."""
    return WALLBOX_STATUS_CODES.get(code, ChargerStatus.UNKNOWN)
