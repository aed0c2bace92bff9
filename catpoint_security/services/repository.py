"""Repository implementations for sensors and system status."""

import json
import os
import threading
from typing import Any, Dict, Optional, Set

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus
from .interfaces import SecurityRepositoryInterface
from ..logging_config import get_logger

logger = get_logger("repository")


class InMemorySecurityRepository(SecurityRepositoryInterface):
    """Keeps sensors and status in process memory."""

    def __init__(self,
                 alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
                 arming_status: ArmingStatus = ArmingStatus.DISARMED):
        self._sensors: Set[Sensor] = set()
        self._alarm_status = alarm_status
        self._arming_status = arming_status
        self._lock = threading.RLock()

    def get_sensors(self) -> Set[Sensor]:
        with self._lock:
            return set(self._sensors)

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            # Replace so the stored object carries the caller's active flag
            self._sensors.discard(sensor)
            self._sensors.add(sensor)
            self._on_change()
        logger.debug(f"Sensor added: {sensor.name} ({sensor.sensor_type.name})")

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            if sensor not in self._sensors:
                return
            self._sensors.discard(sensor)
            self._on_change()
        logger.debug(f"Sensor removed: {sensor.name} ({sensor.sensor_type.name})")

    def update_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.discard(sensor)
            self._sensors.add(sensor)
            self._on_change()

    def get_alarm_status(self) -> AlarmStatus:
        with self._lock:
            return self._alarm_status

    def set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        with self._lock:
            self._alarm_status = alarm_status
            self._on_change()

    def get_arming_status(self) -> ArmingStatus:
        with self._lock:
            return self._arming_status

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        with self._lock:
            self._arming_status = arming_status
            self._on_change()

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the stored state."""
        with self._lock:
            return {
                "alarm_status": self._alarm_status.name,
                "arming_status": self._arming_status.name,
                "sensors": [s.to_dict() for s in sorted(self._sensors, key=_sensor_sort_key)]
            }

    def _on_change(self) -> None:
        """Hook run after every mutation while the lock is held."""
        pass


class JsonFileSecurityRepository(InMemorySecurityRepository):
    """In-memory repository mirrored to a JSON file after every mutation."""

    def __init__(self, state_path: str):
        super().__init__()
        self.state_path = state_path
        self.load()

    def load(self) -> None:
        """Load state from file, keeping defaults when it is missing or unreadable."""
        if not os.path.exists(self.state_path):
            logger.info(f"No state file at {self.state_path}, starting with defaults")
            return

        try:
            with open(self.state_path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            sensors = {Sensor.from_dict(item) for item in data.get("sensors", [])}
            alarm_status = AlarmStatus[data.get("alarm_status", AlarmStatus.NO_ALARM.name)]
            arming_status = ArmingStatus[data.get("arming_status", ArmingStatus.DISARMED.name)]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error loading state from {self.state_path}: {e}. Using defaults.")
            return

        with self._lock:
            self._sensors = sensors
            self._alarm_status = alarm_status
            self._arming_status = arming_status

        logger.info(f"Loaded {len(sensors)} sensors from {self.state_path}")

    def save(self) -> None:
        """Write current state to file."""
        directory = os.path.dirname(self.state_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        tmp_path = f"{self.state_path}.tmp"
        with open(tmp_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        os.replace(tmp_path, self.state_path)

    def _on_change(self) -> None:
        self.save()


def _sensor_sort_key(sensor: Sensor):
    return (sensor.name, sensor.sensor_type.name)


def create_repository(state_path: Optional[str] = None) -> SecurityRepositoryInterface:
    """Build a file-backed repository when a path is given, else an in-memory one."""
    if state_path:
        return JsonFileSecurityRepository(state_path)
    return InMemorySecurityRepository()
