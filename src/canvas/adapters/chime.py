"""Countdown-complete chime: a short decaying sine tone played with PyAudio."""

from __future__ import annotations

import contextlib
import logging
import os
import threading

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
FREQUENCY = 800.0
DURATION = 0.5
START_GAIN = 0.3
END_GAIN = 0.01


@contextlib.contextmanager
def suppress_stderr():
    """Hide ALSA/JACK chatter printed while PortAudio initialises."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        old_stderr = os.dup(2)
    except OSError:
        yield
        return
    try:
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stderr)


def build_tone(
    frequency: float = FREQUENCY,
    duration: float = DURATION,
    sample_rate: int = SAMPLE_RATE,
    start_gain: float = START_GAIN,
    end_gain: float = END_GAIN,
) -> np.ndarray:
    """Mono float32 samples with an exponential gain ramp start_gain -> end_gain."""
    t = np.arange(int(sample_rate * duration)) / sample_rate
    envelope = start_gain * (end_gain / start_gain) ** (t / duration)
    return (np.sin(2 * np.pi * frequency * t) * envelope).astype(np.float32)


class ChimeAdapter:
    """Plays the tone on a daemon thread so the heartbeat is never blocked."""

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self._samples = build_tone()

    def play(self) -> None:
        if not self._enabled:
            return
        threading.Thread(target=self._play, name="Chime", daemon=True).start()

    def _play(self) -> None:
        try:
            with suppress_stderr():
                import pyaudio

                audio = pyaudio.PyAudio()
            try:
                stream = audio.open(
                    format=pyaudio.paFloat32, channels=1, rate=SAMPLE_RATE, output=True
                )
                stream.write(self._samples.tobytes())
                stream.stop_stream()
                stream.close()
            finally:
                audio.terminate()
        except Exception as e:
            logger.info("Audio not available: %s", e)
