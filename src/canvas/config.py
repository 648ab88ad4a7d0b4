"""Process configuration for Canvas (environment and optional .env file).

User-facing settings live in the persisted settings document instead; see
``canvas.core.config_store``.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Config:
    """Environment-driven settings"""

    # Paths
    APP_DIR = Path(os.getenv("CANVAS_HOME", str(Path.home() / ".config" / "canvas"))).expanduser()
    MODULES_DIR = APP_DIR / "modules"
    FLASH_DIR = APP_DIR / "flash"
    CONFIG_DIR = APP_DIR / "config"
    LOG_FILE = APP_DIR / "canvas.log"

    # "development" shows diagnostic tooling (dev overlay, debug log)
    ENV = os.getenv("CANVAS_ENV", "production").strip().lower()
    DEV_MODE = ENV == "development"
    DEBUG = _flag("DEBUG", "false") or DEV_MODE

    # Display: "pygame" or "headless"
    DISPLAY_BACKEND = os.getenv("CANVAS_DISPLAY", "pygame").strip().lower()
    FULLSCREEN = _flag("CANVAS_FULLSCREEN", "true")
    INPUT_LISTENER = _flag("CANVAS_INPUT_LISTENER", "true")

    # Flash updates
    FLASH_EXTENSION = os.getenv("CANVAS_FLASH_EXTENSION", ".js")
    FLASH_POLL_SECONDS = float(os.getenv("CANVAS_FLASH_POLL_SECONDS", "2"))
    FLASH_RELOCATE = _flag("CANVAS_FLASH_RELOCATE", "true")

    # Feedback
    NOTIFICATIONS_ENABLED = _flag("NOTIFICATIONS_ENABLED", "true")
    CHIME_ENABLED = _flag("CANVAS_CHIME", "true")

    @classmethod
    def create_dirs(cls):
        for path in (cls.MODULES_DIR, cls.FLASH_DIR, cls.CONFIG_DIR):
            path.mkdir(parents=True, exist_ok=True)


config = Config()
