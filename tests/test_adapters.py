import numpy as np
import pytest

from canvas.adapters import chime, ui_feedback
from canvas.adapters.display import (
    HeadlessDisplay,
    PygameDisplay,
    get_display,
    row_at,
    settings_row_rects,
)
from canvas.adapters.input_listener import InteractionListener
from canvas.core.countdown import TimerMarker
from canvas.core.idle import InteractionKind
from canvas.core.ports import CompletionSignal, DisplaySurface, UIFeedback
from canvas.core.settings import Setting
from canvas.core.settings_menu import MenuRow
from canvas.core.state_machine import TimerPhase


def test_tone_is_half_second_with_decaying_envelope():
    samples = chime.build_tone(sample_rate=8000)

    assert samples.dtype == np.float32
    assert len(samples) == 4000
    assert np.max(np.abs(samples[:400])) <= 0.3
    assert np.max(np.abs(samples[:400])) > np.max(np.abs(samples[-400:]))
    assert np.max(np.abs(samples[-400:])) < 0.02


def test_disabled_chime_starts_no_thread(monkeypatch):
    started = []
    monkeypatch.setattr(chime.threading, "Thread", lambda **kwargs: started.append(kwargs))

    adapter = chime.ChimeAdapter(enabled=False)
    adapter.play()

    assert started == []
    assert isinstance(adapter, CompletionSignal)


def test_notify_runs_notify_send(monkeypatch):
    calls = []
    monkeypatch.setattr(ui_feedback.shutil, "which", lambda name: "/usr/bin/notify-send")
    monkeypatch.setattr(ui_feedback.subprocess, "Popen", lambda args, **kwargs: calls.append(args))

    adapter = ui_feedback.UIFeedbackAdapter()
    adapter.notify("Title", "Message")

    assert calls == [["notify-send", "-t", "3000", "Title", "Message"]]
    assert isinstance(adapter, UIFeedback)


def test_notify_disabled_or_missing_binary(monkeypatch):
    calls = []
    monkeypatch.setattr(ui_feedback.subprocess, "Popen", lambda args, **kwargs: calls.append(args))

    ui_feedback.UIFeedbackAdapter(enabled=False).notify("Title", "Message")
    monkeypatch.setattr(ui_feedback.shutil, "which", lambda name: None)
    ui_feedback.UIFeedbackAdapter().notify("Title", "Message")

    assert calls == []


def test_listener_callbacks_are_drained_once():
    listener = InteractionListener()
    listener._on_move(1, 2)
    listener._on_move(3, 4)
    listener._on_click(1, 2, "left", True)
    listener._on_click(1, 2, "left", False)
    listener._on_scroll(0, 0, 0, -1)
    listener._on_press("a")

    assert set(listener.drain()) == {
        InteractionKind.POINTER_MOVE,
        InteractionKind.POINTER_DOWN,
        InteractionKind.WHEEL,
        InteractionKind.KEY_DOWN,
    }
    assert listener.drain() == []


def test_headless_display_tracks_presentation_state():
    display = HeadlessDisplay()
    assert isinstance(display, DisplaySurface)

    display.set_opacity(0.3)
    display.set_ticker(True, "Update available: a.js")
    display.show_timer("00:09", TimerPhase.RUNNING, TimerMarker.URGENT)
    display.show_boot_progress(100, "Ready")

    assert display.opacity == 0.3
    assert display.ticker_text == "Update available: a.js"
    assert display.timer_marker is TimerMarker.URGENT
    assert display.booting is False


def test_get_display_backends():
    assert isinstance(get_display("headless"), HeadlessDisplay)
    assert isinstance(get_display("pygame", fullscreen=False), PygameDisplay)
    with pytest.raises(ValueError):
        get_display("framebuffer")


class _Now:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _settings_display():
    display = PygameDisplay(fullscreen=False)
    display._now = _Now()
    selected = []
    display.settings_source = lambda: [
        MenuRow(Setting.NIGHT_SHIFT_ENABLED, "Night Shift", "Off"),
        MenuRow(Setting.DIM_AFTER, "Auto-Dim", "2 min"),
    ]
    display.on_setting_selected = selected.append
    return display, selected


def test_row_rects_are_centred_and_hit_tested():
    rects = settings_row_rects((1200, 800), 5)

    assert rects[0] == (240, 200, 720, 80)
    assert rects[4] == (240, 520, 720, 80)
    assert row_at(rects, (600, 250)) == 0
    assert row_at(rects, (600, 599)) == 4
    assert row_at(rects, (100, 250)) is None


def test_long_press_opens_settings():
    display, _ = _settings_display()

    display._pointer_down((600, 100))
    display._now.now = 1.0
    display._pointer_up((600, 100))
    assert display.settings_open is False

    display._pointer_down((600, 100))
    display._now.now = 3.0
    display._pointer_up((600, 100))
    assert display.settings_open is True


def test_long_press_on_timer_view_is_ignored():
    display, _ = _settings_display()
    display.timer_view = True

    display._pointer_down((600, 700))
    display._now.now = 5.0
    display._pointer_up((600, 700))

    assert display.settings_open is False


def test_tap_on_row_selects_and_tap_outside_closes():
    display, selected = _settings_display()
    display.settings_open = True
    # Two rows of 80 px centred in an 800 px window start at y=320.
    display._pointer_up((600, 410))
    assert selected == [Setting.DIM_AFTER]
    assert display.settings_open is True

    display._pointer_up((10, 10))
    assert display.settings_open is False
