"""Table-driven state machines for the countdown timer and idle presence."""

from __future__ import annotations

from enum import Enum, auto
import logging


class TimerPhase(Enum):
    IDLE = auto()
    LOADED = auto()
    RUNNING = auto()


class TimerEvent(Enum):
    ADD = auto()
    START = auto()
    PAUSE = auto()
    CLEAR = auto()
    EXPIRE = auto()


class PresenceState(Enum):
    ACTIVE = auto()
    DIMMED = auto()


class PresenceEvent(Enum):
    INTERACTION = auto()
    TIMEOUT = auto()


TIMER_TRANSITIONS = {
    TimerPhase.IDLE: {
        TimerEvent.ADD: TimerPhase.LOADED,
        TimerEvent.CLEAR: TimerPhase.IDLE,
    },
    TimerPhase.LOADED: {
        TimerEvent.ADD: TimerPhase.LOADED,
        TimerEvent.START: TimerPhase.RUNNING,
        TimerEvent.PAUSE: TimerPhase.LOADED,
        TimerEvent.CLEAR: TimerPhase.IDLE,
    },
    TimerPhase.RUNNING: {
        TimerEvent.PAUSE: TimerPhase.LOADED,
        TimerEvent.CLEAR: TimerPhase.IDLE,
        TimerEvent.EXPIRE: TimerPhase.IDLE,
    },
}

PRESENCE_TRANSITIONS = {
    PresenceState.ACTIVE: {
        PresenceEvent.INTERACTION: PresenceState.ACTIVE,
        PresenceEvent.TIMEOUT: PresenceState.DIMMED,
    },
    PresenceState.DIMMED: {
        PresenceEvent.INTERACTION: PresenceState.ACTIVE,
        PresenceEvent.TIMEOUT: PresenceState.DIMMED,
    },
}


class StateMachine:
    """Applies events against a transition table; unknown events keep the state."""

    def __init__(self, transitions: dict, initial):
        self._transitions = transitions
        self.state = initial

    def allows(self, event) -> bool:
        return event in self._transitions.get(self.state, {})

    def transition(self, event):
        next_state = self._transitions.get(self.state, {}).get(event, self.state)
        if not self.allows(event):
            logging.getLogger(__name__).warning(
                "Invalid state transition: %s --%s--> %s", self.state, event, next_state
            )
        self.state = next_state
        return self.state


def timer_state_machine() -> StateMachine:
    return StateMachine(TIMER_TRANSITIONS, TimerPhase.IDLE)


def presence_state_machine() -> StateMachine:
    return StateMachine(PRESENCE_TRANSITIONS, PresenceState.ACTIVE)
