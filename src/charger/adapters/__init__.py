"""
Vendor-specific charger adapters.
"""

from .wallbox_adapter import WallboxChargerAdapter, UserToken

__all__ = ['WallboxChargerAdapter', 'UserToken']
