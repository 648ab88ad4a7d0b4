"""Canvas - full-screen kiosk shell for single-board smart displays"""

__version__ = "1.4.1"
__description__ = "Full-screen kiosk shell: clock, countdown, night shift, idle dimming"

__all__ = ["main", "Canvas", "__version__"]


def __getattr__(name: str):
    """Lazy import so the core can be imported without pygame, pynput or a display.

    Tests and headless tooling only need ``canvas.core``.
    """
    if name == "Canvas":
        from .main import Canvas

        return Canvas
    if name == "main":
        from .main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
