#!/usr/bin/env python3
"""Canvas: full-screen kiosk shell (clock, countdown, night shift, idle dim)"""

import logging
import signal
import sys
import threading
from functools import partial
from logging.handlers import RotatingFileHandler

from .adapters.chime import ChimeAdapter
from .adapters.display import get_display
from .adapters.input_listener import InteractionListener
from .adapters.ui_feedback import UIFeedbackAdapter
from .config import config
from .core.config_store import ConfigStore
from .core.controller import ShellController
from .core.countdown import QUICK_ADD_SECONDS
from .core.flash import FlashUpdateWatcher
from .core.settings_menu import menu_rows

QUICK_ADD_KEYS = ("1", "5", "0")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    try:
        config.APP_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                config.LOG_FILE, maxBytes=1_000_000, backupCount=1, encoding="utf-8"
            )
        )
    except OSError as e:
        print(f"⚠ Log file unavailable ({e}), logging to console only")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


class Canvas:
    """Main application - composes the shell and runs the display loop"""

    def __init__(self):
        config.create_dirs()
        self.display = get_display(config.DISPLAY_BACKEND, fullscreen=config.FULLSCREEN)
        self.listener = InteractionListener() if config.INPUT_LISTENER else None
        self.shell = ShellController(
            store=ConfigStore(config.APP_DIR),
            display=self.display,
            ui=UIFeedbackAdapter(enabled=config.NOTIFICATIONS_ENABLED),
            chime=ChimeAdapter(enabled=config.CHIME_ENABLED),
            flash_watcher=FlashUpdateWatcher(
                config.FLASH_DIR,
                extension=config.FLASH_EXTENSION,
                relocate=config.FLASH_RELOCATE,
            ),
            flash_poll_interval=config.FLASH_POLL_SECONDS,
            dev_mode=config.DEV_MODE,
        )
        self._shutdown_event = threading.Event()

    def _bind_display(self):
        """Route window input to the shell (pygame backend only)."""
        if not hasattr(self.display, "key_bindings"):
            return
        shell = self.shell
        self.display.on_interaction = shell.record_interaction
        self.display.key_bindings = {
            key: partial(shell.add_time, seconds)
            for key, seconds in zip(QUICK_ADD_KEYS, QUICK_ADD_SECONDS)
        }
        self.display.key_bindings.update(space=shell.toggle_timer, c=shell.clear_timer)
        self.display.settings_source = lambda: menu_rows(shell.get_config())
        self.display.on_setting_selected = shell.cycle_setting

    def _start_listener(self):
        try:
            self.listener.start()
        except Exception as e:
            # pynput needs an X/Wayland session; the window still sees its own input.
            logger.warning("Global input listener unavailable: %s", e)
            self.listener = None
            return
        self.shell.add_interaction_source(self.listener.drain)

    def run(self):
        """Run the application"""
        print("\n" + "=" * 50)
        print("🖥  Canvas")
        print("=" * 50)
        print(f"Settings: {config.APP_DIR / 'config' / 'settings.json'}")
        print(f"Flash directory: {config.FLASH_DIR} (*{config.FLASH_EXTENSION})")
        print(f"Display: {config.DISPLAY_BACKEND}" + (" (development)" if config.DEV_MODE else ""))
        print("\nKeys: 1/5/0 add 1/5/10 min, Space start/stop, C clear, Esc quit")
        print("Hold the screen for 2 s to open settings")
        print("=" * 50 + "\n")

        self.display.open()
        self._bind_display()
        self.shell.start()
        if self.listener is not None:
            self._start_listener()

        try:
            self.shell.boot(sleep=self.display.wait)
            self.display.run(self.shell.tick, self._shutdown_event.is_set)
        except KeyboardInterrupt:
            pass

        self.shutdown()

    def shutdown(self):
        """Clean shutdown"""
        print("\nShutting down...")
        self._shutdown_event.set()
        self.shell.stop()
        if self.listener is not None:
            self.listener.stop()
        self.display.close()
        print("✓ Done")

    def request_shutdown(self):
        """Request application shutdown (thread-safe)"""
        self._shutdown_event.set()


def main():
    setup_logging(config.DEBUG)
    app = Canvas()

    def signal_handler(sig, frame):
        app.request_shutdown()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    app.run()


if __name__ == "__main__":
    main()
