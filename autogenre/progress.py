"""Progress and status state shared by the resolution and apply passes."""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, List

from autogenre.errors import PassInProgressError

logger = logging.getLogger(__name__)

Listener = Callable[[float, str], None]

# Scan fills the first half of the scan-then-resolve bar, resolution the second
SCAN_START = 10.0
RESOLUTION_BASELINE = 50.0
RESOLUTION_SPAN = 50.0
APPLY_BASELINE = 0.0
APPLY_SPAN = 100.0


class ProgressReporter:
    """
    Holds the current progress (0-100) and status message.

    Within a pass progress never goes backwards: begin_pass() sets the
    pass baseline, advance() only moves forward.
    """

    def __init__(self):
        self._progress = 0.0
        self._status = "Ready to scan"
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def status(self) -> str:
        return self._status

    def subscribe(self, listener: Listener) -> None:
        """Register a callback receiving (progress, status) after each change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._progress, self._status)

    def begin_pass(self, baseline: float, status: str) -> None:
        """Reset progress to a pass baseline."""
        with self._lock:
            self._progress = max(0.0, min(100.0, baseline))
            self._status = status
        self._notify()

    def advance(self, value: float) -> None:
        """Move progress forward to ``value`` (clamped to 100)."""
        with self._lock:
            value = min(100.0, value)
            if value < self._progress:
                logger.debug(
                    f"Ignoring progress regression {self._progress:.1f} -> {value:.1f}"
                )
                return
            self._progress = value
        self._notify()

    def set_status(self, status: str) -> None:
        with self._lock:
            self._status = status
        self._notify()


def pass_progress(baseline: float, span: float, index: int, total: int) -> float:
    """Progress after finishing item ``index`` (0-based) of ``total``."""
    if total <= 0:
        return baseline + span
    return baseline + (index + 1) / total * span


class PassGuard:
    """Makes sure only one pass works on the inventory at a time."""

    def __init__(self):
        self._lock = threading.Lock()
        self._current = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def run(self, name: str):
        """Hold the guard for the duration of a pass."""
        if not self._lock.acquire(blocking=False):
            raise PassInProgressError(
                f"Cannot start {name}: {self._current} is still running"
            )
        self._current = name
        try:
            yield
        finally:
            self._current = None
            self._lock.release()
