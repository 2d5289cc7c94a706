"""
Charger Abstraction Layer

Ports describe what the charging flow needs from a charger; adapters
implement them for a vendor API.
"""

from .models import ChargerStatus, map_to_status
from .ports import ChargerPort
from .adapters import WallboxChargerAdapter

__all__ = [
    'ChargerStatus',
    'map_to_status',
    'ChargerPort',
    'WallboxChargerAdapter',
]
