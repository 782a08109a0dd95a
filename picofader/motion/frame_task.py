from __future__ import annotations

from typing import Callable, Optional


class FrameTask:
    """
    Cancellable per-frame task.

    The step callback gets dt in seconds and returns True to stay scheduled.
    Each start() bumps a generation token; a frame only runs while the
    scheduled token is still the current one, so a cancel from anywhere
    (including inside the step) leaves no residual frame.
    """

    def __init__(self, step: Callable[[float], bool]) -> None:
        self._step = step
        self._generation = 0
        self._scheduled: Optional[int] = None
        self._last_t_ms: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._scheduled is not None and self._scheduled == self._generation

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, t_ms: int) -> int:
        self.cancel()
        self._generation += 1
        self._scheduled = self._generation
        self._last_t_ms = t_ms
        return self._generation

    def cancel(self) -> None:
        self._scheduled = None
        self._last_t_ms = None

    def run_frame(self, t_ms: int) -> bool:
        """Run one step if scheduled. Returns True when a step executed."""
        if not self.running:
            return False
        token = self._scheduled
        assert self._last_t_ms is not None
        dt = (t_ms - self._last_t_ms) / 1000.0
        if dt <= 0.0:
            return False
        self._last_t_ms = t_ms

        keep = self._step(dt)
        if self._scheduled != token:
            # cancelled or restarted from inside the step
            return True
        if not keep:
            self.cancel()
        return True
