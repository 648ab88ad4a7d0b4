"""Idle presence tracking: dims the display after a period without input."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .state_machine import PresenceEvent, PresenceState, presence_state_machine

logger = logging.getLogger(__name__)

ACTIVE_OPACITY = 1.0
DIMMED_OPACITY = 0.3


class InteractionKind(Enum):
    """Input events that count as the user being present."""

    POINTER_DOWN = "pointer-down"
    POINTER_MOVE = "pointer-move"
    KEY_DOWN = "key-down"
    WHEEL = "wheel"
    TOUCH_START = "touch-start"


@dataclass(frozen=True)
class IdleState:
    last_interaction_at: float
    dimmed: bool


class IdlePresenceTracker:
    """ACTIVE/DIMMED tracker driven by interactions and a periodic ``check``.

    Every interaction restarts a countdown of ``dim_after`` seconds. A new
    ``dim_after`` takes effect on the next interaction; a countdown already
    in flight keeps its deadline.
    """

    def __init__(
        self,
        dim_after: float,
        clock: Callable[[], float] = time.monotonic,
        on_change: Callable[[PresenceState], None] | None = None,
    ):
        self._dim_after = float(dim_after)
        self._clock = clock
        self._on_change = on_change
        self._machine = presence_state_machine()
        self._last_interaction_at = clock()
        self._deadline = self._last_interaction_at + self._dim_after

    @property
    def state(self) -> PresenceState:
        return self._machine.state

    @property
    def dimmed(self) -> bool:
        return self._machine.state is PresenceState.DIMMED

    @property
    def dim_after(self) -> float:
        return self._dim_after

    @property
    def snapshot(self) -> IdleState:
        return IdleState(last_interaction_at=self._last_interaction_at, dimmed=self.dimmed)

    def set_dim_after(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("dim_after must be positive")
        self._dim_after = float(seconds)

    def record_interaction(
        self, kind: InteractionKind = InteractionKind.POINTER_MOVE
    ) -> PresenceState:
        """Reset the countdown and force ACTIVE."""
        now = self._clock()
        self._last_interaction_at = now
        self._deadline = now + self._dim_after
        if self.dimmed:
            logger.debug("Woken by %s", kind.value)
        return self._apply(PresenceEvent.INTERACTION)

    def check(self) -> PresenceState:
        """Dim once the countdown has expired; called from the heartbeat."""
        if not self.dimmed and self._clock() >= self._deadline:
            logger.debug("No interaction for %.0fs, dimming", self._dim_after)
            return self._apply(PresenceEvent.TIMEOUT)
        return self.state

    def _apply(self, event: PresenceEvent) -> PresenceState:
        previous = self._machine.state
        state = self._machine.transition(event)
        if state is not previous and self._on_change is not None:
            self._on_change(state)
        return state
