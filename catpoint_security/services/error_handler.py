"""Error types and error tracking for the security system."""

import threading
import traceback
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum

from ..logging_config import get_logger

logger = get_logger("error_handler")


class SecurityError(Exception):
    """Base class for errors raised by the security system."""


class AnalysisFailure(SecurityError):
    """Image analysis could not produce a verdict.

    Distinct from a negative verdict: callers must not treat this as
    "no cat detected".
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ComponentStatus(Enum):
    """Component status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class ErrorRecord:
    """Record of an error occurrence."""
    component_name: str
    error: BaseException
    severity: ErrorSeverity
    timestamp: datetime = field(default_factory=datetime.now)
    traceback_str: str = ""


class ErrorHandler:
    """Records errors per component and derives component health from them."""

    def __init__(self, max_error_history: int = 500):
        self.max_error_history = max_error_history
        self.error_records: List[ErrorRecord] = []
        self.component_error_counts: Dict[str, int] = {}
        self.component_status: Dict[str, ComponentStatus] = {}
        self._lock = threading.Lock()

    def register_component(self, component_name: str) -> None:
        """Register a component for health tracking."""
        with self._lock:
            self.component_error_counts.setdefault(component_name, 0)
            self.component_status.setdefault(component_name, ComponentStatus.HEALTHY)
        logger.debug(f"Component registered: {component_name}")

    def handle_error(self, component_name: str, error: BaseException,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorRecord:
        """Record an error from a component and update its status."""
        error_record = ErrorRecord(
            component_name=component_name,
            error=error,
            severity=severity,
            traceback_str="".join(traceback.format_exception(type(error), error, error.__traceback__))
        )

        with self._lock:
            self.error_records.append(error_record)
            if len(self.error_records) > self.max_error_history:
                del self.error_records[:len(self.error_records) - self.max_error_history]

            self.component_error_counts[component_name] = \
                self.component_error_counts.get(component_name, 0) + 1

            if severity == ErrorSeverity.CRITICAL:
                self.component_status[component_name] = ComponentStatus.FAILED
            elif severity == ErrorSeverity.HIGH:
                self.component_status[component_name] = ComponentStatus.DEGRADED
            else:
                self.component_status.setdefault(component_name, ComponentStatus.HEALTHY)

        logger.error(f"Error in {component_name}: {error} (Severity: {severity.value})")
        return error_record

    def reset_error_counts(self, component_name: Optional[str] = None) -> None:
        """Reset error counts for a component or all components."""
        with self._lock:
            names = [component_name] if component_name else list(self.component_error_counts)
            for name in names:
                if name in self.component_error_counts:
                    self.component_error_counts[name] = 0
                    self.component_status[name] = ComponentStatus.HEALTHY

    def get_component_health(self) -> Dict[str, ComponentStatus]:
        """Get health status of all known components."""
        with self._lock:
            return dict(self.component_status)

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        with self._lock:
            return {
                "total_errors": len(self.error_records),
                "component_error_counts": dict(self.component_error_counts),
                "component_status": {k: v.value for k, v in self.component_status.items()}
            }

    def get_error_summary(self, hours: int = 24) -> Dict[str, Any]:
        """Get summary of errors in the last N hours."""
        cutoff_time = datetime.now() - timedelta(hours=hours)

        with self._lock:
            recent_errors = [e for e in self.error_records if e.timestamp >= cutoff_time]

        component_counts: Dict[str, int] = {}
        severity_counts = {severity.value: 0 for severity in ErrorSeverity}

        for error in recent_errors:
            component_counts[error.component_name] = component_counts.get(error.component_name, 0) + 1
            severity_counts[error.severity.value] += 1

        return {
            "total_errors": len(recent_errors),
            "component_counts": component_counts,
            "severity_counts": severity_counts,
            "time_period_hours": hours
        }

    def clear_error_history(self) -> None:
        """Drop all recorded errors."""
        with self._lock:
            self.error_records.clear()


# Create global error handler instance
global_error_handler = ErrorHandler()
