"""
PicoFader: CORE CONTRACTS

Pointer adapters → Controller → Output gate.
Every timestamp is integer milliseconds on the monotonic clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# ============================================================
# Pointer capture → Controller
# ============================================================

class PointerPhase(str, Enum):
    DOWN = "DOWN"
    MOVE = "MOVE"
    UP = "UP"
    CANCEL = "CANCEL"


@dataclass(frozen=True)
class PointerEvent:
    """
    A single pointer sample in container-local pixels.

    `offset` is the accumulated (dx, dy) since DOWN, only meaningful on UP.
    When the adapter does not track it, the controller derives it.
    """
    t_ms: int
    phase: PointerPhase
    x: float
    y: float = 0.0
    offset: Optional[Tuple[float, float]] = None


# ============================================================
# Controller → Output gate
# ============================================================

class Phase(str, Enum):
    IDLE = "IDLE"
    DRAGGING = "DRAGGING"
    SETTLING = "SETTLING"


class MessageKind(str, Enum):
    POSITION = "POSITION"
    SEQUENCE = "SEQUENCE"
    GESTURE = "GESTURE"   # legacy geste_* protocol


@dataclass(frozen=True)
class OutboundMessage:
    """One fire-and-forget publish. `payload` is already wire-formatted text."""
    t_ms: int
    kind: MessageKind
    topic: str
    payload: str
    value: Optional[float] = None   # POSITION: normalized tail
    stop: Optional[int] = None      # SEQUENCE: 1-based stop index


@dataclass(frozen=True)
class Span:
    """Visually stretched slider body: left edge and length in pixels."""
    offset: float
    length: float


@dataclass(frozen=True)
class SliderView:
    """Read-only snapshot for whatever draws the slider."""
    phase: Phase
    width: float
    head: float
    tail: float
    span: Span
    stops: Tuple[float, ...]
    active: Tuple[bool, ...]


def clamp01(x: float) -> float:
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x
