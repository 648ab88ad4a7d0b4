"""Global input listener (pynput) feeding the idle tracker.

pynput delivers events on its own listener threads. They only record which
kinds of interaction happened; the shell heartbeat drains them on the main
thread, so the idle tracker is never touched from two threads.
"""

from __future__ import annotations

import logging
import threading

from ..core.idle import InteractionKind

logger = logging.getLogger(__name__)


class InteractionListener:
    """Mouse and keyboard listener with a lock-protected pending set."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: set[InteractionKind] = set()
        self._mouse = None
        self._keyboard = None

    def start(self) -> None:
        # Imported here: pynput needs a display server at import time.
        from pynput import keyboard, mouse

        self._mouse = mouse.Listener(
            on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll
        )
        self._keyboard = keyboard.Listener(on_press=self._on_press)
        self._mouse.start()
        self._keyboard.start()
        logger.info("Input listener started")

    def stop(self) -> None:
        for listener in (self._mouse, self._keyboard):
            if listener is not None:
                listener.stop()
        self._mouse = None
        self._keyboard = None

    def drain(self) -> list[InteractionKind]:
        """Interactions seen since the previous drain (each kind at most once)."""
        with self._lock:
            kinds = sorted(self._pending, key=lambda kind: kind.value)
            self._pending.clear()
        return kinds

    def _push(self, kind: InteractionKind) -> None:
        with self._lock:
            self._pending.add(kind)

    def _on_move(self, x, y):
        self._push(InteractionKind.POINTER_MOVE)

    def _on_click(self, x, y, button, pressed):
        if pressed:
            self._push(InteractionKind.POINTER_DOWN)

    def _on_scroll(self, x, y, dx, dy):
        self._push(InteractionKind.WHEEL)

    def _on_press(self, key):
        self._push(InteractionKind.KEY_DOWN)
