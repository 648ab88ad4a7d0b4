"""Core ports (interfaces) for Canvas.

These protocols define the boundaries between the shell core and the
presentation/platform adapters (pygame window, audio, desktop
notifications). They are kept small so the core can be driven headless
in tests.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .state_machine import TimerPhase
    from .countdown import TimerMarker


@runtime_checkable
class DisplaySurface(Protocol):
    """Presentation state of the kiosk screen."""

    def set_brightness(self, percent: int) -> None:
        """Apply the configured brightness (0-100)."""

    def set_opacity(self, opacity: float) -> None:
        """Whole-interface opacity; lowered while idle-dimmed."""

    def set_ticker(self, visible: bool, text: str | None = None) -> None:
        """Show or hide the ticker line; ``text=None`` keeps the idle text."""

    def set_night_shift(self, opacity: float) -> None:
        """Warm overlay opacity; 0 is fully transparent."""

    def show_clock(self, time_text: str, date_text: str) -> None:
        """Update the clock and date lines."""

    def show_timer(self, text: str, phase: "TimerPhase", marker: "TimerMarker") -> None:
        """Update the countdown display."""

    def show_boot_progress(self, percent: int, message: str) -> None:
        """Advance the boot animation; 100 ends it."""

    def set_dev_overlay(self, visible: bool) -> None:
        """Show or hide the diagnostics overlay."""


@runtime_checkable
class CompletionSignal(Protocol):
    """Audible countdown-complete signal."""

    def play(self) -> None:
        """Emit the signal without blocking the caller."""


@runtime_checkable
class UIFeedback(Protocol):
    """Non-blocking user-visible notifications."""

    def notify(self, title: str, message: str) -> None:
        """Display a notification."""
