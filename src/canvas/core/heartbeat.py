"""Single cooperative heartbeat driving every periodic job of the shell."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class _Job:
    name: str
    interval: float
    callback: Callable[[], None]
    next_due: float


class Heartbeat:
    """Runs due jobs in registration order, at most once per ``tick``.

    Missed intervals (a stalled loop, a suspended machine) are skipped, not
    replayed. A failing job is logged and stays scheduled.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._jobs: list[_Job] = []

    def every(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str | None = None,
        run_now: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        now = self._clock()
        self._jobs.append(
            _Job(
                name=name or getattr(callback, "__name__", "job"),
                interval=interval,
                callback=callback,
                next_due=now if run_now else now + interval,
            )
        )

    @property
    def job_names(self) -> list[str]:
        return [job.name for job in self._jobs]

    def tick(self) -> list[str]:
        """Run every due job; returns the names of the jobs that ran."""
        ran = []
        for job in self._jobs:
            now = self._clock()
            if now < job.next_due:
                continue
            try:
                job.callback()
            except Exception:
                logger.exception("Heartbeat job %r failed", job.name)
            ran.append(job.name)
            job.next_due += job.interval
            if job.next_due <= now:
                job.next_due = now + job.interval
        return ran
