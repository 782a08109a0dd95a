from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from picofader.core.easing import linear


@dataclass
class Tween:
    """Time-based interpolation from start to end, sampled on demand."""
    start: float
    end: float
    t0_ms: int
    duration_s: float
    ease: Callable[[float], float] = linear

    def progress(self, t_ms: int) -> float:
        if self.duration_s <= 0.0:
            return 1.0
        p = (t_ms - self.t0_ms) / (self.duration_s * 1000.0)
        return 0.0 if p < 0.0 else 1.0 if p > 1.0 else p

    def value(self, t_ms: int) -> float:
        p = self.progress(t_ms)
        if p >= 1.0:
            return self.end
        return self.start + (self.end - self.start) * self.ease(p)

    def done(self, t_ms: int) -> bool:
        return self.progress(t_ms) >= 1.0
