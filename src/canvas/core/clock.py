"""Clock and date strings for the home screen."""

from __future__ import annotations

from datetime import datetime


def format_clock(now: datetime, time_format: str = "12h") -> str:
    if time_format == "24h":
        return f"{now.hour:02d}:{now.minute:02d}"
    suffix = "PM" if now.hour >= 12 else "AM"
    hours = now.hour % 12 or 12
    return f"{hours}:{now.minute:02d} {suffix}"


def format_date(now: datetime) -> str:
    # e.g. "Saturday, October 17, 2026"
    return f"{now:%A}, {now:%B} {now.day}, {now.year}"
