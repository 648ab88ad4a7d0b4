"""Core orchestration for Canvas.

Wires the settings store, idle tracker, night shift, countdown timer and
flash watcher to the display through one heartbeat, decoupled from the
pygame/audio/notification implementations via ports.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable

from .clock import format_clock, format_date
from .config_model import Configuration
from .config_store import ConfigStore
from .countdown import CountdownTimer, TimerState
from .errors import ConfigWriteError
from .flash import POLL_INTERVAL, FlashUpdateWatcher
from .heartbeat import Heartbeat
from .idle import ACTIVE_OPACITY, DIMMED_OPACITY, IdlePresenceTracker, IdleState, InteractionKind
from .night_shift import EVALUATE_INTERVAL, NightShiftScheduler, now_in
from .ports import CompletionSignal, DisplaySurface, UIFeedback
from .settings import Setting
from .settings_menu import next_value
from .state_machine import PresenceState

logger = logging.getLogger(__name__)

BOOT_STEPS = (
    (20, "Starting system..."),
    (40, "Loading modules..."),
    (60, "Initializing display..."),
    (80, "Finalizing..."),
    (100, "Ready"),
)
BOOT_STEP_SECONDS = 0.3
BOOT_SETTLE_SECONDS = 0.5
FLASH_TICKER_SECONDS = 3.0


class ShellController:
    """Owns the working configuration and every periodic behaviour of the shell."""

    def __init__(
        self,
        store: ConfigStore,
        display: DisplaySurface,
        ui: UIFeedback,
        chime: CompletionSignal,
        flash_watcher: FlashUpdateWatcher,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[str], datetime] = now_in,
        flash_poll_interval: float = POLL_INTERVAL,
        dev_mode: bool = False,
    ):
        self._store = store
        self._display = display
        self._ui = ui
        self._chime = chime
        self._flash = flash_watcher
        self._clock = clock
        self._wall_clock = wall_clock
        self._flash_poll_interval = flash_poll_interval
        self._dev_mode = dev_mode

        self._config = Configuration()
        self._persistent = True
        self._ticker_until: float | None = None
        self._interaction_sources: list[Callable[[], list[InteractionKind]]] = []
        self._unsubscribe: list[Callable[[], None]] = []

        self._heartbeat = Heartbeat(clock)
        self._idle = IdlePresenceTracker(
            self._config.display.dim_after, clock=clock, on_change=self._on_presence_change
        )
        self._night_shift = NightShiftScheduler(display, clock=wall_clock)
        self._timer = CountdownTimer(
            on_change=self._on_timer_change, on_complete=self._on_timer_complete
        )

    # --- lifecycle --------------------------------------------------------

    def start(self) -> Configuration:
        """Load settings, apply them and schedule the periodic jobs."""
        self._store.ensure_layout()
        self._config = self._store.load()
        self._apply_config()

        hb = self._heartbeat
        hb.every(1.0, self._timer.tick, "timer")
        hb.every(1.0, self._idle.check, "idle")
        hb.every(1.0, self._update_clock, "clock")
        hb.every(1.0, self._expire_ticker, "ticker")
        hb.every(EVALUATE_INTERVAL, self._evaluate_night_shift, "night-shift")
        hb.every(self._flash_poll_interval, self._flash.poll, "flash", run_now=True)

        self._unsubscribe.append(self._flash.subscribe(self._on_flash_update))
        self._idle.record_interaction()
        self._show_presence(self._idle.state)
        self._on_timer_change(self._timer)
        logger.info("Shell started (dim after %ss)", self._config.display.dim_after)
        return self._config

    def boot(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Play the boot progress animation, then restart the idle countdown."""
        scale = self._config.animations.duration_multiplier
        for percent, message in BOOT_STEPS:
            sleep(BOOT_STEP_SECONDS * scale)
            self._display.show_boot_progress(percent, message)
        sleep(BOOT_SETTLE_SECONDS * scale)
        self._idle.record_interaction()

    def stop(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    def add_interaction_source(self, drain: Callable[[], list[InteractionKind]]) -> None:
        """Register a callable returning interactions gathered since its last call."""
        self._interaction_sources.append(drain)

    def tick(self) -> list[str]:
        """Drain interaction sources, then run due heartbeat jobs."""
        for drain in self._interaction_sources:
            for kind in drain():
                self.record_interaction(kind)
        return self._heartbeat.tick()

    # --- host interface ---------------------------------------------------

    @property
    def persistent(self) -> bool:
        """False while the last save failed (changes live in memory only)."""
        return self._persistent

    @property
    def timer(self) -> TimerState:
        return self._timer.snapshot

    @property
    def idle(self) -> IdleState:
        return self._idle.snapshot

    def get_config(self) -> Configuration:
        return self._config

    def save_config(self, config: Configuration) -> bool:
        self._config = config
        saved = self._persist()
        self._apply_config()
        return saved

    def update_setting(self, setting: Setting | str, value: Any) -> Configuration:
        """Validate, merge, persist and re-apply one setting.

        Raises InvalidSettingError for unknown settings or rejected values;
        a failed write is logged and reported but keeps the new value.
        """
        setting = Setting.resolve(setting)
        self._config = setting.apply(self._config, value)
        logger.info("Setting %s = %r", setting.path, setting.read(self._config))
        self._persist()
        self._apply_config()
        if setting is Setting.DIM_AFTER:
            self._idle.record_interaction()
        return self._config

    def cycle_setting(self, setting: Setting | str) -> Configuration:
        """Apply the next value of a settings-overlay row (toggle or cycle)."""
        setting = Setting.resolve(setting)
        return self.update_setting(setting, next_value(setting, self._config))

    def on_flash_update(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._flash.subscribe(callback)

    def record_interaction(self, kind: InteractionKind = InteractionKind.POINTER_MOVE) -> None:
        self._idle.record_interaction(kind)

    # --- countdown pass-through --------------------------------------------

    def add_time(self, seconds: int) -> bool:
        return self._timer.add_time(seconds)

    def start_timer(self) -> bool:
        return self._timer.start()

    def pause_timer(self) -> None:
        self._timer.pause()

    def toggle_timer(self) -> bool:
        return self._timer.toggle()

    def clear_timer(self) -> None:
        self._timer.clear()

    # --- internals --------------------------------------------------------

    def _persist(self) -> bool:
        try:
            self._store.save(self._config)
        except ConfigWriteError as e:
            logger.error("%s; continuing with unsaved settings", e)
            if self._persistent:
                self._ui.notify("⚠ Settings not saved", "Changes will be lost on restart")
            self._persistent = False
            return False
        self._persistent = True
        return True

    def _apply_config(self) -> None:
        config = self._config
        self._display.set_brightness(config.display.brightness)
        self._display.set_dev_overlay(config.features.performance_monitor or self._dev_mode)
        self._idle.set_dim_after(config.display.dim_after)

        verbose = config.features.dev_tools or self._dev_mode
        logging.getLogger("canvas").setLevel(logging.DEBUG if verbose else logging.NOTSET)

        self._evaluate_night_shift()
        self._update_clock()

    def _evaluate_night_shift(self) -> None:
        self._night_shift.evaluate(self._config)

    def _update_clock(self) -> None:
        now = self._wall_clock(self._config.time.timezone)
        self._display.show_clock(format_clock(now, self._config.time.format), format_date(now))

    def _show_presence(self, state: PresenceState) -> None:
        dimmed = state is PresenceState.DIMMED
        self._display.set_opacity(DIMMED_OPACITY if dimmed else ACTIVE_OPACITY)
        if self._ticker_until is None:
            self._display.set_ticker(dimmed)

    def _on_presence_change(self, state: PresenceState) -> None:
        logger.debug("Presence: %s", state.name)
        self._show_presence(state)

    def _on_timer_change(self, timer: CountdownTimer) -> None:
        self._display.show_timer(timer.display_text, timer.phase, timer.marker)

    def _on_timer_complete(self) -> None:
        self._chime.play()
        self._ui.notify("⏰ Timer", "Countdown complete")

    def _on_flash_update(self, file_name: str) -> None:
        self._display.set_ticker(True, f"Update available: {file_name}")
        self._ticker_until = self._clock() + FLASH_TICKER_SECONDS
        self._ui.notify("📦 Update available", file_name)

    def _expire_ticker(self) -> None:
        if self._ticker_until is None or self._clock() < self._ticker_until:
            return
        self._ticker_until = None
        self._display.set_ticker(self._idle.dimmed)
