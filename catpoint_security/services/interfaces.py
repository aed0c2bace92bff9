"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from typing import Any, Set

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus


class SecurityRepositoryInterface(ABC):
    """Interface for storage of sensors and system status."""

    @abstractmethod
    def get_sensors(self) -> Set[Sensor]:
        """Get all known sensors."""
        pass

    @abstractmethod
    def add_sensor(self, sensor: Sensor) -> None:
        """Add a sensor."""
        pass

    @abstractmethod
    def remove_sensor(self, sensor: Sensor) -> None:
        """Remove a sensor; unknown sensors are ignored."""
        pass

    @abstractmethod
    def update_sensor(self, sensor: Sensor) -> None:
        """Store the current state of a sensor."""
        pass

    @abstractmethod
    def get_alarm_status(self) -> AlarmStatus:
        """Get the current alarm status."""
        pass

    @abstractmethod
    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        """Set the current alarm status."""
        pass

    @abstractmethod
    def get_arming_status(self) -> ArmingStatus:
        """Get the current arming status."""
        pass

    @abstractmethod
    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Set the current arming status."""
        pass


class ImageServiceInterface(ABC):
    """Interface for image analysis."""

    @abstractmethod
    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        """Check whether the image shows a cat with at least the given confidence."""
        pass


class StatusListener(ABC):
    """Observer notified of security system changes."""

    @abstractmethod
    def notify(self, alarm_status: AlarmStatus) -> None:
        """Called after the alarm status is written."""
        pass

    @abstractmethod
    def cat_detected(self, detected: bool) -> None:
        """Called with the verdict of every image analysis."""
        pass

    @abstractmethod
    def sensor_status_changed(self) -> None:
        """Called after one or more sensors changed state."""
        pass
