"""
Batch progress state and a keyed, thread-safe store for it.

A background job writes progress, one or more observers poll it::

    initial -> running(total, current) -> completed | failed
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class BatchProgress:
    """Immutable snapshot of a batch run."""

    total: int = 0
    current: int = 0
    current_item_label: str | None = None
    running: bool = False
    completed: bool = False
    error: str | None = None

    def __post_init__(self) -> None:
        if self.total < 0 or self.current < 0:
            raise ValueError("total and current must be >= 0")
        if self.total and self.current > self.total:
            raise ValueError(f"current ({self.current}) must not exceed total ({self.total})")

    @classmethod
    def initial(cls) -> BatchProgress:
        return cls()

    @classmethod
    def running_at(cls, total: int, current: int, label: str | None = None) -> BatchProgress:
        return cls(total=total, current=current, current_item_label=label, running=True)

    @classmethod
    def completed_with(cls, total: int) -> BatchProgress:
        return cls(total=total, current=total, completed=True)

    @classmethod
    def failed_with(cls, error: str, total: int = 0, current: int = 0) -> BatchProgress:
        return cls(total=total, current=current, error=error or "unknown error")

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_terminal(self) -> bool:
        return self.completed or self.failed

    @property
    def percentage(self) -> int:
        """Integer percentage in [0, 100]; 0 when total is 0."""
        if self.total <= 0:
            return 0
        return self.current * 100 // self.total

    def to_dict(self) -> dict[str, Any]:
        """Read model for pollers."""
        return {
            "total": self.total,
            "current": self.current,
            "current_item_label": self.current_item_label,
            "running": self.running,
            "completed": self.completed,
            "error": self.error,
            "percentage": self.percentage,
        }


class ProgressTracker:
    """
    Keyed progress store.

    Inject one instance into both the job and its pollers. All access goes
    through an internal lock; callers never need their own synchronization.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[str, BatchProgress] = {}

    def update(self, key: str, progress: BatchProgress) -> None:
        # Last write wins, also after a terminal state
        with self._lock:
            self._states[key] = progress

    def get(self, key: str) -> BatchProgress:
        with self._lock:
            return self._states.get(key) or BatchProgress.initial()

    def remove(self, key: str) -> None:
        with self._lock:
            self._states.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._states)

    def wait_for_terminal(self, key: str, interval: float = 0.5, timeout: float | None = None) -> BatchProgress:
        """
        Poll until the run for ``key`` completes or fails.

        Raises:
            TimeoutError: if ``timeout`` elapses first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            state = self.get(key)
            if state.is_terminal:
                return state
            if deadline is not None and time.monotonic() >= deadline:
                raise TimeoutError(f"Batch '{key}' did not finish within {timeout}s")
            time.sleep(interval)
