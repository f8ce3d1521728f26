"""Background scheduling for index refresh and weight adjustment.

Usage example:
    from nexus_matching.infrastructure.periodic import PeriodicTask

    task = PeriodicTask("index-refresh", interval_seconds=300, action=index.refresh)
    task.start()
    task.trigger()  # run now instead of waiting for the interval
    task.stop()
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import override

from ..exceptions import MatchingError
from ..observability import get_logger
from ..protocols import Clock

logger = get_logger("nexus_matching.periodic")


class SystemClock(Clock):
    """Wall clock in UTC."""

    @override
    def now(self) -> datetime:
        return datetime.now(UTC)


class PeriodicTask:
    """Runs ``action`` on a daemon thread every ``interval_seconds``.

    ``trigger()`` wakes the thread early. Errors raised by the action are
    logged and the next run happens on schedule.
    """

    def __init__(
        self,
        name: str,
        *,
        interval_seconds: float,
        action: Callable[[], object],
        run_immediately: bool = False,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.action = action
        self.run_immediately = run_immediately
        self._wake = threading.Event()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def trigger(self) -> None:
        self._wake.set()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stopping.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> None:
        try:
            self.action()
        except MatchingError as exc:
            logger.warning("Periodic task %s failed: %s", self.name, exc)
        except Exception:
            logger.exception("Periodic task %s raised an unexpected error", self.name)
        finally:
            self.runs += 1

    def _loop(self) -> None:
        if self.run_immediately:
            self.run_once()
        while not self._stopping.is_set():
            self._wake.wait(self.interval_seconds)
            self._wake.clear()
            if self._stopping.is_set():
                break
            self.run_once()
