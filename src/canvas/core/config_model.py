"""Core configuration model (structured view of the settings document).

The persisted document uses the camelCase keys the shell has always written;
the dataclasses below are the typed, always fully populated view of it.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.4.1"
TIME_FORMATS = ("12h", "24h")
ANIMATION_INTENSITIES = ("low", "medium", "high")
FALLBACK_TIMEZONE = "America/New_York"

_CLOCK_TIME = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_clock_time(text: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hours, minutes); raises ValueError otherwise."""
    match = _CLOCK_TIME.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise ValueError(f"not a HH:MM time: {text!r}")
    return int(match.group(1)), int(match.group(2))


def local_timezone() -> str:
    """Best-effort IANA name of the host timezone."""
    tz = os.environ.get("TZ", "").lstrip(":")
    if "/" in tz:
        return tz
    target = os.path.realpath("/etc/localtime")
    if "zoneinfo/" in target:
        return target.split("zoneinfo/", 1)[1]
    return FALLBACK_TIMEZONE


@dataclass(frozen=True)
class NightShiftSettings:
    enabled: bool = False
    start_time: str = "22:00"
    end_time: str = "07:00"
    warmth: float = 0.5


@dataclass(frozen=True)
class DisplaySettings:
    brightness: int = 100
    dim_after: int = 120
    night_shift: NightShiftSettings = field(default_factory=NightShiftSettings)


@dataclass(frozen=True)
class TimeSettings:
    format: str = "12h"
    timezone: str = field(default_factory=local_timezone)


@dataclass(frozen=True)
class AnimationSettings:
    intensity: str = "medium"
    spring_physics: bool = True
    duration_multiplier: float = 1.0


@dataclass(frozen=True)
class FeatureSettings:
    haptic_feedback: bool = True
    dev_tools: bool = False
    performance_monitor: bool = False


@dataclass(frozen=True)
class Configuration:
    """The whole settings document. Immutable; mutate via Setting.apply."""

    version: str = SCHEMA_VERSION
    display: DisplaySettings = field(default_factory=DisplaySettings)
    time: TimeSettings = field(default_factory=TimeSettings)
    animations: AnimationSettings = field(default_factory=AnimationSettings)
    features: FeatureSettings = field(default_factory=FeatureSettings)

    @classmethod
    def from_dict(cls, data) -> Configuration:
        """Build a configuration, filling anything absent or malformed from defaults.

        Filling happens per field at every nesting level, so a document that
        only carries ``{"display": {"nightShift": {"enabled": true}}}`` keeps
        that one value and gets every other field from the defaults.
        """
        data = data if isinstance(data, dict) else {}
        display = _section(data, "display")
        night = _section(display, "nightShift")
        time_ = _section(data, "time")
        animations = _section(data, "animations")
        features = _section(data, "features")

        base = cls()
        d_night = base.display.night_shift
        return cls(
            version=_text(data, "version", base.version),
            display=DisplaySettings(
                brightness=_int(display, "brightness", base.display.brightness, 0, 100),
                dim_after=_int(display, "dimAfter", base.display.dim_after, 1, None),
                night_shift=NightShiftSettings(
                    enabled=_bool(night, "enabled", d_night.enabled),
                    start_time=_clock(night, "startTime", d_night.start_time),
                    end_time=_clock(night, "endTime", d_night.end_time),
                    warmth=_float(night, "warmth", d_night.warmth, 0.0, 1.0),
                ),
            ),
            time=TimeSettings(
                format=_choice(time_, "format", base.time.format, TIME_FORMATS),
                timezone=_text(time_, "timezone", base.time.timezone),
            ),
            animations=AnimationSettings(
                intensity=_choice(
                    animations, "intensity", base.animations.intensity, ANIMATION_INTENSITIES
                ),
                spring_physics=_bool(animations, "springPhysics", base.animations.spring_physics),
                duration_multiplier=_positive_float(
                    animations, "durationMultiplier", base.animations.duration_multiplier
                ),
            ),
            features=FeatureSettings(
                haptic_feedback=_bool(features, "hapticFeedback", base.features.haptic_feedback),
                dev_tools=_bool(features, "devTools", base.features.dev_tools),
                performance_monitor=_bool(
                    features, "performanceMonitor", base.features.performance_monitor
                ),
            ),
        )

    def to_dict(self) -> dict:
        night = self.display.night_shift
        return {
            "version": self.version,
            "display": {
                "brightness": self.display.brightness,
                "dimAfter": self.display.dim_after,
                "nightShift": {
                    "enabled": night.enabled,
                    "startTime": night.start_time,
                    "endTime": night.end_time,
                    "warmth": night.warmth,
                },
            },
            "time": {
                "format": self.time.format,
                "timezone": self.time.timezone,
            },
            "animations": {
                "intensity": self.animations.intensity,
                "springPhysics": self.animations.spring_physics,
                "durationMultiplier": self.animations.duration_multiplier,
            },
            "features": {
                "hapticFeedback": self.features.haptic_feedback,
                "devTools": self.features.dev_tools,
                "performanceMonitor": self.features.performance_monitor,
            },
        }


# --- field coercion -------------------------------------------------------
# Absent keys silently take the default; present-but-invalid values are
# logged so a hand-edited document does not fail quietly.


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Settings section %r is not an object, using defaults", key)
        return {}
    return value


def _rejected(key: str, value, default):
    logger.warning("Invalid value for %r: %r, using %r", key, value, default)
    return default


def _bool(section: dict, key: str, default: bool) -> bool:
    if key not in section:
        return default
    value = section[key]
    if isinstance(value, bool):
        return value
    return _rejected(key, value, default)


def _is_number(value) -> bool:
    # json accepts NaN, Infinity and overflowing literals such as 1e400
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _int(section: dict, key: str, default: int, minimum: int | None, maximum: int | None) -> int:
    if key not in section:
        return default
    value = section[key]
    if not _is_number(value):
        return _rejected(key, value, default)
    value = int(round(value))
    if minimum is not None and value < minimum:
        if maximum is None:
            return _rejected(key, value, default)
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


def _float(section: dict, key: str, default: float, minimum: float, maximum: float) -> float:
    if key not in section:
        return default
    value = section[key]
    if not _is_number(value):
        return _rejected(key, value, default)
    return min(max(float(value), minimum), maximum)


def _positive_float(section: dict, key: str, default: float) -> float:
    if key not in section:
        return default
    value = section[key]
    if not _is_number(value) or value <= 0:
        return _rejected(key, value, default)
    return float(value)


def _text(section: dict, key: str, default: str) -> str:
    if key not in section:
        return default
    value = section[key]
    if isinstance(value, str) and value.strip():
        return value
    return _rejected(key, value, default)


def _choice(section: dict, key: str, default: str, choices: tuple[str, ...]) -> str:
    if key not in section:
        return default
    value = section[key]
    if value in choices:
        return value
    return _rejected(key, value, default)


def _clock(section: dict, key: str, default: str) -> str:
    if key not in section:
        return default
    value = section[key]
    try:
        hours, minutes = parse_clock_time(value)
    except ValueError:
        return _rejected(key, value, default)
    return f"{hours:02d}:{minutes:02d}"
