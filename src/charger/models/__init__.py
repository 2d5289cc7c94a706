"""
Domain models for the charger abstraction layer.
"""

from .charger_status import ChargerStatus, WALLBOX_STATUS_CODES, map_to_status

__all__ = [
    'ChargerStatus',
    'WALLBOX_STATUS_CODES',
    'map_to_status',
]
