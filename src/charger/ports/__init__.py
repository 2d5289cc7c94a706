"""
Port Interfaces for the Charger Abstraction Layer.

Using the port and adapter pattern, these ports represent the charging
flow's needs, while adapters translate to vendor-specific remote APIs.
"""

from .charger_port import ChargerPort

__all__ = [
    'ChargerPort',
]
