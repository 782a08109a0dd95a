from __future__ import annotations
import math


def smoothing_alpha(stiffness: float, dt: float) -> float:
    # framerate-independent exponential smoothing factor
    return 1.0 - math.exp(-stiffness * max(dt, 0.0))


def linear(p: float) -> float:
    return p


def _bezier(t: float, p1: float, p2: float) -> float:
    # 1D cubic bezier with endpoints pinned at 0 and 1
    u = 1.0 - t
    return 3.0 * u * u * t * p1 + 3.0 * u * t * t * p2 + t * t * t


def _cubic_bezier(x1: float, y1: float, x2: float, y2: float):
    def ease(p: float) -> float:
        if p <= 0.0:
            return 0.0
        if p >= 1.0:
            return 1.0
        # solve x(t) = p by bisection, x is monotonic for x1,x2 in [0,1]
        lo, hi = 0.0, 1.0
        t = p
        for _ in range(30):
            x = _bezier(t, x1, x2)
            if abs(x - p) < 1e-6:
                break
            if x < p:
                lo = t
            else:
                hi = t
            t = (lo + hi) / 2.0
        return _bezier(t, y1, y2)
    return ease


ease_in_out = _cubic_bezier(0.42, 0.0, 0.58, 1.0)
