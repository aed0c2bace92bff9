"""Security service: alarm status transitions and listener fan-out."""

import logging
import threading
from typing import Any, Dict, Optional, Set

from ..models.sensor import Sensor
from ..models.status import AlarmStatus, ArmingStatus
from .interfaces import ImageServiceInterface, SecurityRepositoryInterface, StatusListener
from .error_handler import AnalysisFailure, ErrorHandler, ErrorSeverity, global_error_handler
from ..logging_config import get_logger, log_with_context

logger = get_logger("security_service")

DEFAULT_CONFIDENCE_THRESHOLD = 0.5


class SecurityService:
    """Decides the alarm status from sensor, image and arming events.

    All durable state lives in the repository. The only state held here is
    the listener set and the verdict of the most recent image analysis, which
    is consulted when the system is armed at home.

    Every public operation runs its read-decide-write-notify sequence under a
    single re-entrant lock, so concurrent callers never act on stale status.
    Listener failures are logged and recorded, never propagated.
    """

    def __init__(self,
                 repository: SecurityRepositoryInterface,
                 image_service: ImageServiceInterface,
                 confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
                 error_handler: Optional[ErrorHandler] = None):
        self.repository = repository
        self.image_service = image_service
        self.confidence_threshold = max(0.0, min(1.0, confidence_threshold))
        self.error_handler = error_handler or global_error_handler

        self._listeners: Set[StatusListener] = set()
        self._cat_detected = False
        self._lock = threading.RLock()

        self.error_handler.register_component("image_service")
        self.error_handler.register_component("status_listener")

    # Listeners

    def add_status_listener(self, listener: StatusListener) -> None:
        with self._lock:
            self._listeners.add(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        with self._lock:
            self._listeners.discard(listener)

    # Transitions

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Change the arming mode.

        Disarming always clears the alarm. Arming resets every sensor to
        inactive, and arming at home while a cat is in view raises the alarm.
        """
        with self._lock:
            sensors_reset = False
            if arming_status.is_armed:
                for sensor in self.repository.get_sensors():
                    sensor.active = False
                    self.repository.update_sensor(sensor)
                    sensors_reset = True

            self.repository.set_arming_status(arming_status)
            logger.info(f"Arming status set to {arming_status.name}")

            if arming_status == ArmingStatus.DISARMED:
                self._set_alarm_status(AlarmStatus.NO_ALARM)
            elif arming_status == ArmingStatus.ARMED_HOME and self._cat_detected:
                self._set_alarm_status(AlarmStatus.ALARM)

            if sensors_reset:
                self._fan_out("sensor_status_changed")

    def change_sensor_activation_status(self, sensor: Sensor, active: bool) -> None:
        """Set a sensor's active flag and apply the resulting alarm transition."""
        with self._lock:
            alarm_status = self.repository.get_alarm_status()
            arming_status = self.repository.get_arming_status()
            was_active = sensor.active

            if alarm_status != AlarmStatus.ALARM:
                if active:
                    self._handle_sensor_activated(alarm_status, arming_status)
                elif was_active:
                    self._handle_sensor_deactivated(alarm_status)

            sensor.active = active
            self.repository.update_sensor(sensor)

            log_with_context(logger, logging.DEBUG, "Sensor activation changed", {
                "sensor": sensor.name,
                "type": sensor.sensor_type.name,
                "was_active": was_active,
                "active": active
            })
            self._fan_out("sensor_status_changed")

    def process_image(self, image: Any) -> bool:
        """Analyze an image for cats and update the alarm status.

        Returns:
            The cat-detection verdict.

        Raises:
            AnalysisFailure: if the analyzer fails. The alarm status and the
                previous verdict are left untouched.
        """
        with self._lock:
            detected = self._analyze(image)
            self._cat_detected = detected

            if detected:
                if self.repository.get_arming_status() == ArmingStatus.ARMED_HOME:
                    self._set_alarm_status(AlarmStatus.ALARM)
            elif not any(sensor.active for sensor in self.repository.get_sensors()):
                self._set_alarm_status(AlarmStatus.NO_ALARM)

            self._fan_out("cat_detected", detected)
            return detected

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the cat-detection confidence threshold, clamped to 0..1."""
        with self._lock:
            self.confidence_threshold = max(0.0, min(1.0, threshold))
        logger.info(f"Cat confidence threshold set to {self.confidence_threshold}")

    # Repository pass-throughs

    def get_alarm_status(self) -> AlarmStatus:
        return self.repository.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self.repository.get_arming_status()

    def get_sensors(self) -> Set[Sensor]:
        return self.repository.get_sensors()

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.repository.add_sensor(sensor)

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self.repository.remove_sensor(sensor)

    @property
    def cat_detected(self) -> bool:
        """Verdict of the most recent successful image analysis."""
        return self._cat_detected

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the whole system state."""
        with self._lock:
            sensors = sorted(self.repository.get_sensors(),
                             key=lambda s: (s.name, s.sensor_type.name))
            return {
                "alarm_status": self.repository.get_alarm_status().name,
                "arming_status": self.repository.get_arming_status().name,
                "cat_detected": self._cat_detected,
                "sensors": [sensor.to_dict() for sensor in sensors]
            }

    # Internals

    def _handle_sensor_activated(self, alarm_status: AlarmStatus,
                                 arming_status: ArmingStatus) -> None:
        if not arming_status.is_armed:
            return

        if alarm_status == AlarmStatus.NO_ALARM:
            self._set_alarm_status(AlarmStatus.PENDING_ALARM)
        elif alarm_status == AlarmStatus.PENDING_ALARM:
            self._set_alarm_status(AlarmStatus.ALARM)

    def _handle_sensor_deactivated(self, alarm_status: AlarmStatus) -> None:
        # Applied per sensor; deactivating several sensors while pending
        # writes NO_ALARM once for each of them.
        if alarm_status == AlarmStatus.PENDING_ALARM:
            self._set_alarm_status(AlarmStatus.NO_ALARM)

    def _analyze(self, image: Any) -> bool:
        try:
            return bool(self.image_service.image_contains_cat(image, self.confidence_threshold))
        except AnalysisFailure as e:
            self.error_handler.handle_error("image_service", e, ErrorSeverity.HIGH)
            raise
        except Exception as e:
            failure = AnalysisFailure(f"Image analysis failed: {e}", e)
            self.error_handler.handle_error("image_service", failure, ErrorSeverity.HIGH)
            raise failure from e

    def _set_alarm_status(self, alarm_status: AlarmStatus) -> None:
        self.repository.set_alarm_status(alarm_status)
        logger.info(f"Alarm status set to {alarm_status.name}")
        self._fan_out("notify", alarm_status)

    def _fan_out(self, method_name: str, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, method_name)(*args)
            except Exception as e:
                logger.error(f"Status listener {listener!r} failed in {method_name}: {e}")
                self.error_handler.handle_error("status_listener", e, ErrorSeverity.LOW)
