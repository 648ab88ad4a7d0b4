"""Flash updates: script files dropped into the watched directory.

The watcher only reports that a file arrived. It never opens, validates or
runs the file; what the shell does with a flashed module is up to the
subscriber.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .errors import FlashDetectionError

logger = logging.getLogger(__name__)

PROCESSED_DIR = "processed"
POLL_INTERVAL = 2.0


@dataclass(frozen=True)
class PendingFlashFile:
    file_name: str
    detected_at: float


class FlashUpdateWatcher:
    """Polls ``directory`` and announces each qualifying file once.

    With ``relocate`` on, an announced file is moved into ``processed/`` so
    the next poll cannot find it again. Files that stay in place (relocation
    off or failed) are remembered by name, inode and mtime, so only a
    physically new file is announced again.
    """

    def __init__(
        self,
        directory: Path,
        extension: str = ".js",
        relocate: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.directory = Path(directory)
        self.extension = extension if extension.startswith(".") else f".{extension}"
        self.relocate = relocate
        self._clock = clock
        self._subscribers: list[Callable[[str], None]] = []
        self._seen: set[tuple[str, int, int]] = set()

    @property
    def processed_dir(self) -> Path:
        return self.directory / PROCESSED_DIR

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register ``callback(file_name)``; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def poll(self) -> list[PendingFlashFile]:
        try:
            entries = self._scan()
        except FlashDetectionError as e:
            logger.warning("%s; retrying next poll", e)
            return []

        detected = []
        present = set()
        for entry in entries:
            try:
                stat = entry.stat()
            except OSError:
                continue  # vanished since the scan
            identity = (entry.name, stat.st_ino, stat.st_mtime_ns)
            present.add(identity)
            if identity in self._seen:
                continue
            if not (self.relocate and self._move_to_processed(entry)):
                self._seen.add(identity)
            pending = PendingFlashFile(file_name=entry.name, detected_at=self._clock())
            logger.info("Flash update detected: %s", pending.file_name)
            detected.append(pending)
            self._announce(pending.file_name)

        # Forget files that have gone away so the set cannot grow forever.
        self._seen &= present
        return detected

    def _scan(self) -> list[os.DirEntry]:
        try:
            with os.scandir(self.directory) as it:
                entries = [entry for entry in it if self._qualifies(entry)]
        except OSError as e:
            raise FlashDetectionError(f"Cannot scan {self.directory}: {e}") from e
        return sorted(entries, key=lambda entry: entry.name)

    def _qualifies(self, entry: os.DirEntry) -> bool:
        if entry.name.startswith("."):
            return False
        if not entry.name.endswith(self.extension):
            return False
        try:
            return entry.is_file()
        except OSError:
            return False

    def _move_to_processed(self, entry: os.DirEntry) -> bool:
        try:
            self.processed_dir.mkdir(exist_ok=True)
            os.replace(entry.path, self.processed_dir / entry.name)
        except OSError as e:
            logger.warning("Could not move %s to %s: %s", entry.name, self.processed_dir, e)
            return False
        return True

    def _announce(self, file_name: str) -> None:
        for callback in list(self._subscribers):
            try:
                callback(file_name)
            except Exception:
                logger.exception("Flash update subscriber failed for %s", file_name)
