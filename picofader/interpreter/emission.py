from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from picofader.core.types import MessageKind, OutboundMessage, clamp01


@dataclass
class Throttle:
    """
    Monotonic-clock gate. Calls inside the window are refused, never queued.
    """
    interval_ms: int = 50
    _last_ms: Optional[int] = None

    def allow(self, t_ms: int) -> bool:
        if self._last_ms is not None and (t_ms - self._last_ms) < self.interval_ms:
            return False
        self._last_ms = t_ms
        return True

    def reset(self) -> None:
        self._last_ms = None


@dataclass
class OnceLatch:
    """fire() is True exactly once per latch."""
    _fired: bool = False

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self) -> bool:
        if self._fired:
            return False
        self._fired = True
        return True


def format_fade(value: float) -> str:
    return f"{clamp01(value):.3f}"


def position_message(t_ms: int, value: float, topic: str) -> OutboundMessage:
    v = clamp01(value)
    return OutboundMessage(t_ms=t_ms, kind=MessageKind.POSITION, topic=topic,
                           payload=format_fade(v), value=v)


def sequence_message(t_ms: int, stop_index: int, topic: str) -> OutboundMessage:
    n = stop_index + 1
    return OutboundMessage(t_ms=t_ms, kind=MessageKind.SEQUENCE, topic=topic,
                           payload=f"Initialize Sequence {n}", stop=n)


# ---------------------- legacy geste_* protocol ----------------------

def classify_gesture(dx: float, dy: float, min_distance: float = 50.0) -> str:
    if abs(dx) <= min_distance and abs(dy) <= min_distance:
        return "tap"
    if abs(dx) > abs(dy):
        return "rechts" if dx > 0 else "links"
    return "runter" if dy > 0 else "hoch"


def gesture_message(t_ms: int, segment: str, direction: str, topic: str) -> OutboundMessage:
    return OutboundMessage(t_ms=t_ms, kind=MessageKind.GESTURE, topic=topic,
                           payload=f"geste_{segment}_{direction}")
