"""Sensor data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class SensorType(Enum):
    """Kinds of binary sensors the system knows about."""
    DOOR = "door"
    WINDOW = "window"
    MOTION = "motion"


@dataclass(unsafe_hash=True)
class Sensor:
    """A named binary sensor.

    Identity is the (name, sensor_type) pair. The active flag is excluded from
    equality and hashing so a sensor keeps its place in a set while toggled.
    """
    name: str
    sensor_type: SensorType
    active: bool = field(default=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize sensor to a JSON-friendly dict."""
        return {
            "name": self.name,
            "type": self.sensor_type.name,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sensor":
        """Build a sensor from the dict produced by to_dict()."""
        return cls(
            name=data["name"],
            sensor_type=SensorType[data["type"]],
            active=bool(data.get("active", False)),
        )
