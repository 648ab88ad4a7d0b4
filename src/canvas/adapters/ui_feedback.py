"""UI feedback adapter (desktop notifications via notify-send)."""

from __future__ import annotations

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)


class UIFeedbackAdapter:
    def __init__(self, enabled: bool = True, timeout: int = 3):
        self._enabled = enabled
        self._timeout = timeout

    def notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        if not self._enabled:
            return
        if shutil.which("notify-send") is None:
            return
        try:
            # Fire and forget; the shell loop must not wait on the notification daemon.
            subprocess.Popen(
                ["notify-send", "-t", str(self._timeout * 1000), title, message],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug("notify-send failed: %s", e)
