"""Alarm and arming status enumerations."""

from enum import Enum


class AlarmStatus(Enum):
    """Three-level alarm escalation state."""
    NO_ALARM = "no_alarm"
    PENDING_ALARM = "pending_alarm"
    ALARM = "alarm"

    @property
    def description(self) -> str:
        return _ALARM_DESCRIPTIONS[self]


class ArmingStatus(Enum):
    """Arming mode selected by the user."""
    DISARMED = "disarmed"
    ARMED_HOME = "armed_home"
    ARMED_AWAY = "armed_away"

    @property
    def description(self) -> str:
        return _ARMING_DESCRIPTIONS[self]

    @property
    def is_armed(self) -> bool:
        """True for both armed modes; they share the same transition rules."""
        return self is not ArmingStatus.DISARMED


_ALARM_DESCRIPTIONS = {
    AlarmStatus.NO_ALARM: "Cool and Good",
    AlarmStatus.PENDING_ALARM: "I'm in Danger...",
    AlarmStatus.ALARM: "Awooga!",
}

_ARMING_DESCRIPTIONS = {
    ArmingStatus.DISARMED: "Disarmed",
    ArmingStatus.ARMED_HOME: "Armed - At Home",
    ArmingStatus.ARMED_AWAY: "Armed - Away",
}
