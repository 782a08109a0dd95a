from __future__ import annotations

import math
from dataclasses import dataclass

from picofader.core.config import ChaseTuning
from picofader.core.easing import smoothing_alpha
from picofader.core.types import Span
from picofader.geometry.track import Track


@dataclass
class CursorPair:
    """
    Head follows the pointer, tail chases the head.
    Positions are track-local pixels of the handle center.
    """
    track: Track
    chase: ChaseTuning = ChaseTuning()

    head: float = 0.0
    tail: float = 0.0
    tail_velocity: float = 0.0

    def set_head(self, x: float, clamp: bool = True) -> None:
        self.head = self.track.clamp(x) if clamp else x

    def rest_at(self, x: float) -> None:
        self.head = x
        self.tail = x
        self.tail_velocity = 0.0

    def rescale(self, track: Track) -> None:
        """Carry head and tail over to a new layout, relative to the stop range."""
        old = self.track
        self.track = track
        if not (old.valid and track.valid):
            return
        old_len = old.max_x - old.min_x
        new_len = track.max_x - track.min_x

        def carry(x: float) -> float:
            if old_len <= 0:
                return track.min_x + new_len / 2.0
            return track.min_x + (x - old.min_x) / old_len * new_len

        self.head = carry(self.head)
        self.tail = carry(self.tail)

    @property
    def span(self) -> Span:
        half = self.track.handle_size / 2.0
        return Span(
            offset=min(self.head, self.tail) - half,
            length=abs(self.head - self.tail) + self.track.handle_size,
        )

    def chase_step(self, dt: float) -> bool:
        """
        One integration step of the tail toward the head.
        Returns True when the tail moved.
        """
        if dt <= 0.0:
            return False

        distance = self.head - self.tail
        if abs(distance) < self.chase.deadband_px:
            self.tail_velocity = 0.0
            return False

        target_v = math.copysign(self.chase.max_speed_px_s, distance)
        self.tail_velocity += (target_v - self.tail_velocity) * smoothing_alpha(self.chase.stiffness, dt)

        new_tail = self.tail + self.tail_velocity * dt
        # contact stop: never carry the tail past the head
        if (distance > 0 and new_tail > self.head) or (distance < 0 and new_tail < self.head):
            new_tail = self.head
            self.tail_velocity = 0.0

        moved = new_tail != self.tail
        self.tail = new_tail
        return moved
