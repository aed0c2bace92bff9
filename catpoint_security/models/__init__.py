"""Data models for the catpoint security system."""

from .sensor import Sensor, SensorType
from .status import AlarmStatus, ArmingStatus
from .config import SecurityConfig

__all__ = ['Sensor', 'SensorType', 'AlarmStatus', 'ArmingStatus', 'SecurityConfig']
