"""Rows of the long-press settings overlay and the value each tap moves to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config_model import TIME_FORMATS, Configuration
from .errors import InvalidSettingError
from .settings import Setting

LONG_PRESS_SECONDS = 2.0
DIM_AFTER_CHOICES = (60, 120, 300)

MENU_SETTINGS = (
    (Setting.NIGHT_SHIFT_ENABLED, "Night Shift"),
    (Setting.HAPTIC_FEEDBACK, "Haptic Feedback"),
    (Setting.PERFORMANCE_MONITOR, "Performance Monitor"),
    (Setting.TIME_FORMAT, "Time Format"),
    (Setting.DIM_AFTER, "Auto-Dim"),
)


@dataclass(frozen=True)
class MenuRow:
    setting: Setting
    label: str
    value_text: str


def _describe(setting: Setting, value: Any) -> str:
    if isinstance(value, bool):
        return "On" if value else "Off"
    if setting is Setting.DIM_AFTER:
        return f"{value // 60} min" if value % 60 == 0 else f"{value} s"
    return str(value)


def menu_rows(config: Configuration) -> list[MenuRow]:
    return [
        MenuRow(setting, label, _describe(setting, setting.read(config)))
        for setting, label in MENU_SETTINGS
    ]


def _cycle(choices: tuple, current: Any) -> Any:
    if current not in choices:
        return choices[0]
    return choices[(choices.index(current) + 1) % len(choices)]


def next_value(setting: Setting, config: Configuration) -> Any:
    """Value a tap on ``setting``'s row selects: toggle, or the next choice."""
    if setting not in dict(MENU_SETTINGS):
        raise InvalidSettingError(f"{setting.path} is not available in the settings overlay")
    current = setting.read(config)
    if setting is Setting.TIME_FORMAT:
        return _cycle(TIME_FORMATS, current)
    if setting is Setting.DIM_AFTER:
        return _cycle(DIM_AFTER_CHOICES, current)
    return not current
