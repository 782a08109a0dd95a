from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from picofader.core.config import KEY_COLORS, SEGMENT_NAMES


def compute_stops(width: float, handle_size: float = 30.0, stop_count: int = 7) -> Tuple[float, ...]:
    """
    Resting handle centers, evenly spaced across width - handle_size.
    Empty when the track has no width yet. A track narrower than the handle
    collapses every stop onto handle_size / 2.
    """
    if width <= 0 or stop_count <= 0:
        return ()
    if stop_count == 1:
        return (width / 2.0,)
    step = max(0.0, width - handle_size) / (stop_count - 1)
    return tuple(step * i + handle_size / 2.0 for i in range(stop_count))


def closest_stop_index(stops: Sequence[float], x: float) -> Optional[int]:
    # strict < keeps the first (lowest) index on ties
    best = None
    best_d = math.inf
    for i, s in enumerate(stops):
        d = abs(s - x)
        if d < best_d:
            best, best_d = i, d
    return best


def stop_index_at(stops: Sequence[float], x: float, tolerance: float = 1.0) -> Optional[int]:
    i = closest_stop_index(stops, x)
    if i is None or abs(stops[i] - x) >= tolerance:
        return None
    return i


def segment_index_at(x: float, width: float, count: int = len(SEGMENT_NAMES)) -> Optional[int]:
    if width <= 0:
        return None
    i = math.floor((x / width) * count)
    return max(0, min(i, count - 1))


def segment_name_at(x: float, width: float) -> str:
    i = segment_index_at(x, width)
    return "" if i is None else SEGMENT_NAMES[i]


def gradient_color_at(fraction: float) -> Tuple[int, int, int]:
    """RGB along the key-color gradient, fraction in [0, 1]."""
    f = 0.0 if fraction < 0.0 else 1.0 if fraction > 1.0 else fraction
    pos = f * (len(KEY_COLORS) - 1)
    i = min(int(pos), len(KEY_COLORS) - 2)
    u = pos - i
    a, b = KEY_COLORS[i], KEY_COLORS[i + 1]
    return tuple(int(round(a[c] + (b[c] - a[c]) * u)) for c in range(3))


@dataclass(frozen=True)
class Track:
    """One layout pass of the track. Rebuild when the container width changes."""
    width: float
    handle_size: float = 30.0
    stop_count: int = 7
    stops: Tuple[float, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stops", compute_stops(self.width, self.handle_size, self.stop_count))

    @property
    def valid(self) -> bool:
        return self.width > 0

    @property
    def min_x(self) -> float:
        return self.handle_size / 2.0

    @property
    def max_x(self) -> float:
        return max(self.min_x, self.width - self.handle_size / 2.0)

    def clamp(self, x: float) -> float:
        return max(self.min_x, min(self.max_x, x))

    def normalize(self, x: float) -> float:
        if self.width <= 0:
            return 0.0
        return x / self.width
