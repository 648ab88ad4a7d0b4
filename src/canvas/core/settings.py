"""Settable configuration fields.

Every field the settings overlay may change is a ``Setting`` member carrying
its document path and a validator, so mutations are checked before they
reach the in-memory configuration or the store.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config_model import ANIMATION_INTENSITIES, TIME_FORMATS, Configuration, parse_clock_time
from .errors import InvalidSettingError


def _boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise InvalidSettingError(f"expected true/false, got {value!r}")


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidSettingError(f"expected a number, got {value!r}")
    try:
        number = float(value)
    except (ValueError, OverflowError):
        raise InvalidSettingError(f"expected a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidSettingError(f"expected a finite number, got {value!r}")
    return number


def _percent(value: Any) -> int:
    number = _number(value)
    if not 0 <= number <= 100:
        raise InvalidSettingError(f"brightness must be within 0-100, got {value!r}")
    return int(round(number))


def _seconds(value: Any) -> int:
    # The overlay's <select> hands over strings ("60"); accept them.
    number = _number(value)
    if number < 1 or number != int(number):
        raise InvalidSettingError(f"expected a whole number of seconds > 0, got {value!r}")
    return int(number)


def _unit_interval(value: Any) -> float:
    number = _number(value)
    if not 0.0 <= number <= 1.0:
        raise InvalidSettingError(f"expected a value within 0-1, got {value!r}")
    return number


def _positive(value: Any) -> float:
    number = _number(value)
    if number <= 0:
        raise InvalidSettingError(f"expected a value > 0, got {value!r}")
    return number


def _clock_time(value: Any) -> str:
    try:
        hours, minutes = parse_clock_time(value)
    except ValueError as e:
        raise InvalidSettingError(str(e)) from None
    return f"{hours:02d}:{minutes:02d}"


def _one_of(choices: tuple[str, ...]) -> Callable[[Any], str]:
    def validate(value: Any) -> str:
        if value not in choices:
            raise InvalidSettingError(f"expected one of {', '.join(choices)}, got {value!r}")
        return value

    return validate


def _timezone(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidSettingError(f"expected an IANA timezone name, got {value!r}")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidSettingError(f"unknown timezone {value!r}") from None
    return value


class Setting(Enum):
    """Tagged variant of every settable field: (document path, validator)."""

    BRIGHTNESS = ("display.brightness", _percent)
    DIM_AFTER = ("display.dimAfter", _seconds)
    NIGHT_SHIFT_ENABLED = ("display.nightShift.enabled", _boolean)
    NIGHT_SHIFT_START = ("display.nightShift.startTime", _clock_time)
    NIGHT_SHIFT_END = ("display.nightShift.endTime", _clock_time)
    NIGHT_SHIFT_WARMTH = ("display.nightShift.warmth", _unit_interval)
    TIME_FORMAT = ("time.format", _one_of(TIME_FORMATS))
    TIMEZONE = ("time.timezone", _timezone)
    ANIMATION_INTENSITY = ("animations.intensity", _one_of(ANIMATION_INTENSITIES))
    SPRING_PHYSICS = ("animations.springPhysics", _boolean)
    DURATION_MULTIPLIER = ("animations.durationMultiplier", _positive)
    HAPTIC_FEEDBACK = ("features.hapticFeedback", _boolean)
    DEV_TOOLS = ("features.devTools", _boolean)
    PERFORMANCE_MONITOR = ("features.performanceMonitor", _boolean)

    def __init__(self, path: str, validator: Callable[[Any], Any]):
        self.path = path
        self.validator = validator

    @classmethod
    def resolve(cls, name: Setting | str) -> Setting:
        """Look up a setting by member, dotted path or overlay short name."""
        if isinstance(name, Setting):
            return name
        for member in cls:
            if member.path == name:
                return member
        alias = _OVERLAY_ALIASES.get(name)
        if alias is not None:
            return alias
        raise InvalidSettingError(f"unknown setting {name!r}")

    def validate(self, value: Any) -> Any:
        return self.validator(value)

    def apply(self, config: Configuration, value: Any) -> Configuration:
        """Return a copy of ``config`` with this field set to ``value``."""
        value = self.validate(value)
        document = config.to_dict()
        *parents, leaf = self.path.split(".")
        node = document
        for key in parents:
            node = node[key]
        node[leaf] = value
        return Configuration.from_dict(document)

    def read(self, config: Configuration) -> Any:
        node = config.to_dict()
        for key in self.path.split("."):
            node = node[key]
        return node


# Short names accepted alongside dotted paths.
_OVERLAY_ALIASES = {
    "nightShift": Setting.NIGHT_SHIFT_ENABLED,
    "hapticFeedback": Setting.HAPTIC_FEEDBACK,
    "performanceMonitor": Setting.PERFORMANCE_MONITOR,
    "timeFormat": Setting.TIME_FORMAT,
    "dimAfter": Setting.DIM_AFTER,
}
