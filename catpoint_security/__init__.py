"""
Catpoint Security System

Home alarm controller that tracks door, window and motion sensors, an arming
mode and an alarm status, and raises the alarm when a camera image shows a cat
while the system is armed at home.
"""

__version__ = "1.0.0"
__author__ = "Catpoint Security System"

# Import core components
from .config_manager import ConfigManager
from .models import (
    Sensor,
    SensorType,
    AlarmStatus,
    ArmingStatus,
    SecurityConfig
)
from .services import (
    SecurityRepositoryInterface,
    ImageServiceInterface,
    StatusListener,
    SecurityError,
    AnalysisFailure,
    InMemorySecurityRepository,
    JsonFileSecurityRepository,
    EventLogListener,
    SecurityService
)

__all__ = [
    # Core management
    'ConfigManager',
    'SecurityService',

    # Data models
    'Sensor',
    'SensorType',
    'AlarmStatus',
    'ArmingStatus',
    'SecurityConfig',

    # Service interfaces
    'SecurityRepositoryInterface',
    'ImageServiceInterface',
    'StatusListener',

    # Implementations
    'InMemorySecurityRepository',
    'JsonFileSecurityRepository',
    'EventLogListener',

    # Errors
    'SecurityError',
    'AnalysisFailure'
]
