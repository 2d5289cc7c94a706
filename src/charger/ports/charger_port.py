"""
Charger Port Interface

Defines the interface for querying and controlling an EV charger.
"""

from abc import ABC, abstractmethod
from ..models.charger_status import ChargerStatus


class ChargerPort(ABC):
    """
    Abstract interface for charger control.

    Implementations of this port provide vendor-specific remote calls
    while maintaining a consistent interface for the charging flow.
    Every method raises ControlActionFailed when the charger API reports
    a non-success response.
    """

    @abstractmethod
    def get_status(self) -> ChargerStatus:
        """
        Get current charger status.

        Returns:
            ChargerStatus, UNKNOWN for unrecognised vendor codes
        """
        pass

    @abstractmethod
    def set_energy_cost(self, cost: float) -> None:
        """
        Set the energy cost reported by the charger.

        Args:
            cost: Final price per kWh
        """
        pass

    @abstractmethod
    def unlock(self) -> None:
        """Unlock the charger."""
        pass

    @abstractmethod
    def pause(self) -> None:
        """Pause the running charging session."""
        pass

    @abstractmethod
    def resume(self) -> None:
        """Resume a paused or scheduled charging session."""
        pass
