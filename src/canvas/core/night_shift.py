"""Night shift: warm overlay during a configured wall-clock window."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config_model import Configuration, NightShiftSettings, parse_clock_time
from .ports import DisplaySurface

logger = logging.getLogger(__name__)

EVALUATE_INTERVAL = 60.0


def minutes_of_day(text: str) -> int:
    hours, minutes = parse_clock_time(text)
    return hours * 60 + minutes


def in_window(now: int, start: int, end: int) -> bool:
    """Whether minute-of-day ``now`` falls in [start, end), wrapping midnight.

    A window whose start equals its end is empty.
    """
    if start > end:
        return now >= start or now < end
    return start <= now < end


def night_shift_opacity(settings: NightShiftSettings, now: datetime) -> float:
    if not settings.enabled:
        return 0.0
    current = now.hour * 60 + now.minute
    active = in_window(
        current, minutes_of_day(settings.start_time), minutes_of_day(settings.end_time)
    )
    return settings.warmth if active else 0.0


def now_in(timezone: str) -> datetime:
    """Current wall-clock time in ``timezone``, or local time if unknown."""
    try:
        return datetime.now(ZoneInfo(timezone))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using local time", timezone)
        return datetime.now()


class NightShiftScheduler:
    """Pushes the warm overlay opacity to the display.

    Holds no state between evaluations; re-evaluating at the same instant
    with the same configuration always yields the same opacity.
    """

    def __init__(
        self,
        display: DisplaySurface,
        clock: Callable[[str], datetime] = now_in,
    ):
        self._display = display
        self._clock = clock

    def evaluate(self, config: Configuration) -> float:
        opacity = night_shift_opacity(config.display.night_shift, self._clock(config.time.timezone))
        self._display.set_night_shift(opacity)
        return opacity
