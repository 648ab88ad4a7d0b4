import pytest

from canvas.core.countdown import CountdownTimer, TimerMarker, TimerState
from canvas.core.state_machine import TimerPhase


def _timer():
    completions = []
    timer = CountdownTimer(on_complete=lambda: completions.append(True))
    return timer, completions


def test_sixty_second_countdown_completes_once():
    timer, completions = _timer()
    timer.add_time(60)
    assert timer.start() is True

    for _ in range(60):
        timer.tick()

    assert completions == [True]
    assert timer.snapshot == TimerState(remaining_seconds=0, running=False)
    assert timer.phase == TimerPhase.IDLE

    # Further ticks after completion do nothing.
    timer.tick()
    assert completions == [True]


def test_add_time_while_running_is_rejected():
    timer, _ = _timer()
    timer.add_time(60)
    timer.start()
    timer.tick()

    assert timer.add_time(300) is False
    assert timer.remaining_seconds == 59


def test_pause_then_add_extends():
    timer, _ = _timer()
    timer.add_time(60)
    timer.start()
    timer.tick()
    timer.pause()

    assert timer.add_time(60) is True
    assert timer.remaining_seconds == 119
    assert timer.phase == TimerPhase.LOADED


def test_start_with_nothing_loaded_is_noop():
    timer, _ = _timer()
    assert timer.start() is False
    assert timer.running is False


def test_pause_preserves_remaining_time():
    timer, _ = _timer()
    timer.add_time(300)
    timer.start()
    timer.tick()
    timer.tick()
    timer.pause()
    timer.tick()

    assert timer.snapshot == TimerState(remaining_seconds=298, running=False)


def test_clear_resets_without_completion():
    timer, completions = _timer()
    timer.add_time(60)
    timer.start()
    timer.clear()

    assert timer.snapshot == TimerState(remaining_seconds=0, running=False)
    assert timer.phase == TimerPhase.IDLE
    assert completions == []


def test_toggle_acts_as_start_stop_button():
    timer, _ = _timer()
    timer.add_time(60)
    assert timer.toggle() is True
    assert timer.toggle() is False
    assert timer.remaining_seconds == 60


def test_markers_in_final_seconds():
    timer, _ = _timer()
    timer.add_time(12)
    timer.start()
    assert timer.marker == TimerMarker.NONE

    timer.tick()
    timer.tick()
    assert timer.remaining_seconds == 10
    assert timer.marker == TimerMarker.URGENT

    for _ in range(7):
        timer.tick()
    assert timer.remaining_seconds == 3
    assert timer.marker == TimerMarker.PULSE

    timer.pause()
    assert timer.marker == TimerMarker.NONE


def test_display_text():
    timer, _ = _timer()
    assert timer.display_text == "00:00"
    timer.add_time(600)
    timer.add_time(65)
    assert timer.display_text == "11:05"


def test_non_positive_add_raises():
    timer, _ = _timer()
    with pytest.raises(ValueError):
        timer.add_time(0)


def test_on_change_reports_every_step():
    seen = []
    timer = CountdownTimer(on_change=lambda t: seen.append((t.phase, t.remaining_seconds)))
    timer.add_time(2)
    timer.start()
    timer.tick()
    timer.tick()

    assert seen == [
        (TimerPhase.LOADED, 2),
        (TimerPhase.RUNNING, 2),
        (TimerPhase.RUNNING, 1),
        (TimerPhase.IDLE, 0),
    ]
