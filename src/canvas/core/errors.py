"""Error taxonomy for the Canvas core.

None of these are fatal to the shell: read and detection errors are logged
and recovered locally, write errors are reported to the caller while the
in-memory configuration stays authoritative.
"""

from __future__ import annotations


class CanvasError(Exception):
    """Base class for Canvas core errors."""


class ConfigReadError(CanvasError):
    """Settings document missing, unreadable or corrupt."""


class ConfigWriteError(CanvasError, OSError):
    """Settings document could not be persisted."""


class FlashDetectionError(CanvasError):
    """Flash update directory could not be scanned."""


class InvalidSettingError(CanvasError, ValueError):
    """A settings mutation was rejected by its validator."""
