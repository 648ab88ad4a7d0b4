"""Persistent settings document (``config/settings.json``)."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from .config_model import Configuration
from .errors import ConfigReadError, ConfigWriteError

logger = logging.getLogger(__name__)

LAYOUT_DIRS = ("modules", "flash", "config")
SETTINGS_FILE = "settings.json"


class ConfigStore:
    """Loads, default-fills and atomically persists the settings document.

    The store is the only writer of the persisted copy. ``load`` never
    raises: a missing or corrupt document is replaced by the defaults.
    ``save`` raises ``ConfigWriteError`` and leaves the previous document
    untouched when it fails.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.path = self.root / "config" / SETTINGS_FILE

    def ensure_layout(self) -> None:
        for name in LAYOUT_DIRS:
            (self.root / name).mkdir(parents=True, exist_ok=True)

    def load_raw(self) -> dict | None:
        """Return the parsed document, or None if it is absent or unreadable."""
        try:
            return self._read()
        except ConfigReadError as e:
            logger.warning("%s", e)
            return None

    def load(self) -> Configuration:
        try:
            raw = self._read()
        except ConfigReadError as e:
            logger.warning("%s; using defaults", e)
            raw = None

        if raw is None:
            config = Configuration()
            self._persist_recovered(config, "Created default settings at %s")
            return config

        config = Configuration.from_dict(raw)
        if config.to_dict() != raw:
            self._persist_recovered(config, "Filled missing settings in %s")
        else:
            logger.info("Loaded settings from %s", self.path)
        return config

    def save(self, config: Configuration) -> None:
        """Overwrite the whole document: temp file in place, fsync, rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".settings.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(config.to_dict(), f, indent=2)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, self.path)
            finally:
                if os.path.exists(tmp):
                    os.unlink(tmp)
        except OSError as e:
            raise ConfigWriteError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Settings saved to %s", self.path)

    def _read(self) -> dict | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigReadError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigReadError(f"{self.path} does not hold a JSON object")
        return data

    def _persist_recovered(self, config: Configuration, message: str) -> None:
        try:
            self.save(config)
        except ConfigWriteError as e:
            logger.error("%s", e)
            return
        logger.info(message, self.path)
