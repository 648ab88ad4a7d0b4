"""Countdown timer with add/start/pause/clear and a one-shot completion signal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from .state_machine import TimerEvent, TimerPhase, timer_state_machine

logger = logging.getLogger(__name__)

URGENT_SECONDS = 10
PULSE_SECONDS = 3
QUICK_ADD_SECONDS = (60, 300, 600)


class TimerMarker(Enum):
    NONE = auto()
    URGENT = auto()  # last ten seconds
    PULSE = auto()  # last few seconds


@dataclass(frozen=True)
class TimerState:
    remaining_seconds: int
    running: bool


class CountdownTimer:
    """IDLE <-> LOADED <-> RUNNING countdown, decremented by ``tick``.

    The timer does not schedule itself; the shell heartbeat calls ``tick``
    once per second. Reaching zero clears the timer and calls
    ``on_complete`` exactly once.
    """

    def __init__(
        self,
        on_change: Callable[["CountdownTimer"], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ):
        self._on_change = on_change
        self._on_complete = on_complete
        self._machine = timer_state_machine()
        self._remaining = 0

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def phase(self) -> TimerPhase:
        return self._machine.state

    @property
    def running(self) -> bool:
        return self._machine.state is TimerPhase.RUNNING

    @property
    def snapshot(self) -> TimerState:
        return TimerState(remaining_seconds=self._remaining, running=self.running)

    @property
    def marker(self) -> TimerMarker:
        if not self.running or self._remaining > URGENT_SECONDS:
            return TimerMarker.NONE
        if self._remaining <= PULSE_SECONDS:
            return TimerMarker.PULSE
        return TimerMarker.URGENT

    @property
    def display_text(self) -> str:
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def add_time(self, seconds: int) -> bool:
        """Add time to a stopped timer; returns False while running."""
        if seconds <= 0:
            raise ValueError("seconds must be positive")
        if self.running:
            logger.debug("Ignoring add_time(%d) while running", seconds)
            return False
        self._remaining += int(seconds)
        self._machine.transition(TimerEvent.ADD)
        self._changed()
        return True

    def start(self) -> bool:
        if self._remaining == 0 or self.running:
            return False
        self._machine.transition(TimerEvent.START)
        self._changed()
        return True

    def pause(self) -> None:
        if not self.running:
            return
        self._machine.transition(TimerEvent.PAUSE)
        self._changed()

    def toggle(self) -> bool:
        """Start/stop button: returns whether the timer is now running."""
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def clear(self) -> None:
        if self.phase is TimerPhase.IDLE:
            return
        self._remaining = 0
        self._machine.transition(TimerEvent.CLEAR)
        self._changed()

    def tick(self) -> None:
        if not self.running:
            return
        self._remaining -= 1
        if self._remaining > 0:
            self._changed()
            return

        self._remaining = 0
        self._machine.transition(TimerEvent.EXPIRE)
        self._changed()
        logger.info("Countdown complete")
        if self._on_complete is not None:
            self._on_complete()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
