"""Kiosk display adapters: full-screen pygame window, or headless logging."""

from __future__ import annotations

import logging
import os
import time
from typing import Callable

from ..core.countdown import TimerMarker
from ..core.idle import InteractionKind
from ..core.settings import Setting
from ..core.settings_menu import LONG_PRESS_SECONDS, MenuRow
from ..core.state_machine import TimerPhase

logger = logging.getLogger(__name__)

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Colors
BACKGROUND = (245, 245, 247)  # #F5F5F7
TEXT = (29, 29, 31)
TEXT_MUTED = (134, 134, 139)  # #86868B, idle timer
BLUE = (0, 122, 255)  # #007AFF, loaded timer
ORANGE = (255, 149, 0)  # #FF9500, running timer
RED = (255, 59, 48)  # #FF3B30, last seconds
GREEN = (52, 199, 89)  # #34C759
WARM = (255, 138, 40)  # night shift tint

WINDOW_SIZE = (1200, 800)
FPS = 60
IDLE_TICKER_TEXT = "Touch to wake"
PANEL = (255, 255, 255)
TIMER_AREA_TOP = 0.6  # fraction of the height below which the timer view sits

TIMER_COLORS = {
    TimerPhase.IDLE: TEXT_MUTED,
    TimerPhase.LOADED: BLUE,
    TimerPhase.RUNNING: ORANGE,
}


class _PresentationState:
    """What the shell last asked the screen to show."""

    def __init__(self):
        self.brightness = 100
        self.opacity = 1.0
        self.ticker_visible = False
        self.ticker_text: str | None = None
        self.night_shift = 0.0
        self.time_text = ""
        self.date_text = ""
        self.timer_text = "00:00"
        self.timer_phase = TimerPhase.IDLE
        self.timer_marker = TimerMarker.NONE
        self.boot_percent = 0
        self.boot_message = ""
        self.dev_overlay = False

    @property
    def booting(self) -> bool:
        return self.boot_percent < 100

    def set_brightness(self, percent: int) -> None:
        self.brightness = percent

    def set_opacity(self, opacity: float) -> None:
        self.opacity = opacity

    def set_ticker(self, visible: bool, text: str | None = None) -> None:
        self.ticker_visible = visible
        self.ticker_text = text

    def set_night_shift(self, opacity: float) -> None:
        self.night_shift = opacity

    def show_clock(self, time_text: str, date_text: str) -> None:
        self.time_text = time_text
        self.date_text = date_text

    def show_timer(self, text: str, phase: TimerPhase, marker: TimerMarker) -> None:
        self.timer_text = text
        self.timer_phase = phase
        self.timer_marker = marker

    def show_boot_progress(self, percent: int, message: str) -> None:
        self.boot_percent = percent
        self.boot_message = message

    def set_dev_overlay(self, visible: bool) -> None:
        self.dev_overlay = visible


class HeadlessDisplay(_PresentationState):
    """Display port without a screen; logs the interesting changes."""

    def set_opacity(self, opacity: float) -> None:
        if opacity != self.opacity:
            logger.info("Display opacity %.1f", opacity)
        super().set_opacity(opacity)

    def set_ticker(self, visible: bool, text: str | None = None) -> None:
        if text:
            logger.info("Ticker: %s", text)
        super().set_ticker(visible, text)

    def set_night_shift(self, opacity: float) -> None:
        if opacity != self.night_shift:
            logger.info("Night shift overlay %.2f", opacity)
        super().set_night_shift(opacity)

    def show_boot_progress(self, percent: int, message: str) -> None:
        logger.info("Boot %d%% %s", percent, message)
        super().show_boot_progress(percent, message)

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def wait(self, seconds: float) -> None:
        time.sleep(seconds)

    def run(self, on_frame: Callable[[], object], should_stop: Callable[[], bool]) -> None:
        while not should_stop():
            on_frame()
            time.sleep(1 / FPS)


class PygameDisplay(_PresentationState):
    """Full-screen kiosk window.

    Every pygame input event is forwarded to ``on_interaction``; keys found
    in ``key_bindings`` (pygame key names, e.g. "space") run their action.
    The mouse wheel reveals (down) or hides (up) the timer view.

    Holding a press for ``LONG_PRESS_SECONDS`` (outside the timer view) opens
    the settings overlay: rows come from ``settings_source`` and a tap on a
    row calls ``on_setting_selected`` with its setting. A tap outside the
    rows, or Esc, closes it.
    """

    def __init__(self, fullscreen: bool = True):
        super().__init__()
        self.fullscreen = fullscreen
        self.on_interaction: Callable[[InteractionKind], None] | None = None
        self.key_bindings: dict[str, Callable[[], object]] = {}
        self.timer_view = False
        self.settings_source: Callable[[], list[MenuRow]] = list
        self.on_setting_selected: Callable[[Setting], object] | None = None
        self.settings_open = False
        self._press: tuple[tuple[int, int], float] | None = None
        self._now: Callable[[], float] = time.monotonic
        self._size = WINDOW_SIZE
        self._pygame = None
        self._screen = None
        self._clock = None
        self._fonts: dict[int, object] = {}
        self._quit = False

    def open(self) -> None:
        import pygame

        pygame.init()
        if self.fullscreen:
            self._screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
            pygame.mouse.set_visible(False)
        else:
            self._screen = pygame.display.set_mode(WINDOW_SIZE, pygame.NOFRAME)
        self._size = self._screen.get_size()
        pygame.display.set_caption("Canvas")
        self._pygame = pygame
        self._clock = pygame.time.Clock()

    def close(self) -> None:
        if self._pygame is not None:
            self._pygame.quit()
            self._pygame = None

    def wait(self, seconds: float) -> None:
        """Keep drawing (boot animation) for ``seconds``."""
        deadline = time.monotonic() + seconds
        while time.monotonic() < deadline and not self._quit:
            self._frame()

    def run(self, on_frame: Callable[[], object], should_stop: Callable[[], bool]) -> None:
        while not (self._quit or should_stop()):
            on_frame()
            self._frame()

    # --- frame loop -------------------------------------------------------

    def _frame(self) -> None:
        self._handle_events()
        self._draw()
        self._clock.tick(FPS)

    def _handle_events(self) -> None:
        pygame = self._pygame
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._quit = True
            elif event.type == pygame.MOUSEMOTION:
                self._interaction(InteractionKind.POINTER_MOVE)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self._interaction(InteractionKind.POINTER_DOWN)
                # Touch screens also emit synthetic mouse events; FINGER* covers those.
                if event.button == 1 and not getattr(event, "touch", False):
                    self._pointer_down(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1 and not getattr(event, "touch", False):
                    self._pointer_up(event.pos)
            elif event.type == pygame.FINGERDOWN:
                self._interaction(InteractionKind.TOUCH_START)
                self._pointer_down(self._finger_pos(event))
            elif event.type == pygame.FINGERUP:
                self._pointer_up(self._finger_pos(event))
            elif event.type == pygame.MOUSEWHEEL:
                self._interaction(InteractionKind.WHEEL)
                self.timer_view = event.y < 0
            elif event.type == pygame.KEYDOWN:
                self._interaction(InteractionKind.KEY_DOWN)
                if event.key == pygame.K_ESCAPE:
                    if self.settings_open:
                        self.settings_open = False
                    else:
                        self._quit = True
                    continue
                action = self.key_bindings.get(pygame.key.name(event.key))
                if action is not None:
                    self.timer_view = True
                    action()

    def _interaction(self, kind: InteractionKind) -> None:
        if self.on_interaction is not None:
            self.on_interaction(kind)

    def _finger_pos(self, event) -> tuple[int, int]:
        # Finger coordinates are normalised to 0-1.
        width, height = self._size
        return int(event.x * width), int(event.y * height)

    @property
    def timer_visible(self) -> bool:
        return self.timer_view or self.timer_phase is TimerPhase.RUNNING

    def _pointer_down(self, pos: tuple[int, int]) -> None:
        if self.settings_open:
            return
        if self.timer_visible and pos[1] >= self._size[1] * TIMER_AREA_TOP:
            self._press = None
            return
        self._press = (pos, self._now())

    def _pointer_up(self, pos: tuple[int, int]) -> None:
        if self.settings_open:
            self._select_setting(pos)
            return
        press, self._press = self._press, None
        if press is not None and self._now() - press[1] >= LONG_PRESS_SECONDS:
            logger.debug("Long press, opening settings")
            self.settings_open = True

    def _select_setting(self, pos: tuple[int, int]) -> None:
        rows = self.settings_source()
        index = row_at(settings_row_rects(self._size, len(rows)), pos)
        if index is None:
            self.settings_open = False
        elif self.on_setting_selected is not None:
            self.on_setting_selected(rows[index].setting)

    def _font(self, size: int):
        if size not in self._fonts:
            self._fonts[size] = self._pygame.font.SysFont(None, size)
        return self._fonts[size]

    def _text(self, text: str, size: int, color, center) -> None:
        surface = self._font(size).render(text, True, color)
        self._screen.blit(surface, surface.get_rect(center=center))

    def _draw(self) -> None:
        screen = self._screen
        width, height = self._size = screen.get_size()
        screen.fill(BACKGROUND)

        if self.booting:
            self._draw_boot(width, height)
            self._pygame.display.flip()
            return

        self._text(self.time_text, height // 5, TEXT, (width // 2, height // 2 - height // 10))
        self._text(self.date_text, height // 18, TEXT_MUTED, (width // 2, height // 2 + height // 20))

        if self.timer_visible:
            self._draw_timer(width, height)

        if self.ticker_visible:
            text = self.ticker_text or IDLE_TICKER_TEXT
            self._text(text, height // 24, TEXT_MUTED, (width // 2, height - height // 12))

        if self.night_shift > 0:
            self._overlay(WARM, self.night_shift)

        # Dimming and brightness both darken the whole frame.
        darkness = 1.0 - (self.brightness / 100.0) * self.opacity
        if darkness > 0:
            self._overlay((0, 0, 0), darkness)

        if self.settings_open:
            self._draw_settings(width, height)

        if self.dev_overlay:
            self._draw_fps(width)

        self._pygame.display.flip()

    def _draw_settings(self, width: int, height: int) -> None:
        pygame = self._pygame
        self._overlay((0, 0, 0), 0.4)
        rows = self.settings_source()
        rects = settings_row_rects((width, height), len(rows))
        if not rects:
            return
        _, top, _, row_height = rects[0]
        self._text("Settings", height // 20, PANEL, (width // 2, top - row_height // 2))
        for row, (x, y, w, h) in zip(rows, rects):
            pygame.draw.rect(self._screen, PANEL, (x, y + 2, w, h - 4), border_radius=12)
            label = self._font(h // 2).render(row.label, True, TEXT)
            self._screen.blit(label, label.get_rect(midleft=(x + 24, y + h // 2)))
            value = self._font(h // 2).render(row.value_text, True, BLUE)
            self._screen.blit(value, value.get_rect(midright=(x + w - 24, y + h // 2)))
        bottom = rects[-1][1] + row_height
        self._text("Tap outside to close", height // 30, PANEL, (width // 2, bottom + row_height // 2))

    def _draw_boot(self, width: int, height: int) -> None:
        pygame = self._pygame
        bar_width = width // 3
        x = (width - bar_width) // 2
        y = height // 2
        pygame.draw.rect(self._screen, (229, 229, 231), (x, y, bar_width, 6), border_radius=3)
        filled = bar_width * self.boot_percent // 100
        if filled:
            pygame.draw.rect(self._screen, BLUE, (x, y, filled, 6), border_radius=3)
        self._text(self.boot_message, height // 30, TEXT_MUTED, (width // 2, y + height // 20))

    def _draw_timer(self, width: int, height: int) -> None:
        color = TIMER_COLORS[self.timer_phase]
        if self.timer_marker is not TimerMarker.NONE:
            color = RED
        if self.timer_marker is TimerMarker.PULSE and (self._pygame.time.get_ticks() // 250) % 2:
            color = tuple(int(c * 0.7 + 255 * 0.3) for c in color)
        self._text(self.timer_text, height // 8, color, (width // 2, height - height // 4))

    def _overlay(self, color, opacity: float) -> None:
        surface = self._pygame.Surface(self._screen.get_size(), self._pygame.SRCALPHA)
        surface.fill((*color, int(255 * max(0.0, min(opacity, 1.0)))))
        self._screen.blit(surface, (0, 0))

    def _draw_fps(self, width: int) -> None:
        fps = round(self._clock.get_fps())
        color = GREEN if fps >= 55 else ORANGE if fps >= 30 else RED
        surface = self._font(24).render(f"{fps} FPS", True, color)
        self._screen.blit(surface, (width - surface.get_width() - 12, 12))


def settings_row_rects(size: tuple[int, int], count: int) -> list[tuple[int, int, int, int]]:
    """Screen rectangles (x, y, width, height) of the settings overlay rows."""
    width, height = size
    row_height = height // 10
    panel_width = min(width * 2 // 3, 720)
    x = (width - panel_width) // 2
    top = (height - row_height * count) // 2
    return [(x, top + i * row_height, panel_width, row_height) for i in range(count)]


def row_at(rects, pos: tuple[int, int]) -> int | None:
    px, py = pos
    for index, (x, y, w, h) in enumerate(rects):
        if x <= px < x + w and y <= py < y + h:
            return index
    return None


def get_display(backend: str, fullscreen: bool = True):
    """Display adapter for ``CANVAS_DISPLAY`` ("pygame" or "headless")."""
    if backend == "pygame":
        return PygameDisplay(fullscreen=fullscreen)
    if backend == "headless":
        return HeadlessDisplay()
    raise ValueError(f"Unknown display backend {backend!r}")
