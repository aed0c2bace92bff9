"""Status listener implementations."""

import threading
from collections import deque
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models.status import AlarmStatus
from .interfaces import StatusListener
from ..logging_config import get_logger

logger = get_logger("listeners")


class EventLogListener(StatusListener):
    """Keeps a bounded, timestamped log of the most recent notifications."""

    def __init__(self, max_events: int = 100):
        self._events = deque(maxlen=max_events)
        self._lock = threading.Lock()
        self.last_alarm_status: Optional[AlarmStatus] = None
        self.last_cat_verdict: Optional[bool] = None

    def notify(self, alarm_status: AlarmStatus) -> None:
        self.last_alarm_status = alarm_status
        self._record("alarm_status", alarm_status.name)
        logger.info(f"Alarm status changed: {alarm_status.name} ({alarm_status.description})")

    def cat_detected(self, detected: bool) -> None:
        self.last_cat_verdict = detected
        self._record("cat_detected", detected)
        if detected:
            logger.warning("DANGER - CAT DETECTED")
        else:
            logger.info("No cat in latest image")

    def sensor_status_changed(self) -> None:
        self._record("sensor_status_changed", None)
        logger.debug("Sensor status changed")

    def get_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent events, newest last."""
        with self._lock:
            events = list(self._events)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def _record(self, event_type: str, value: Any) -> None:
        with self._lock:
            self._events.append({
                "timestamp": datetime.now().isoformat(),
                "event": event_type,
                "value": value
            })
