from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from picofader.core.config import Preset
from picofader.core.easing import ease_in_out, linear
from picofader.core.logger import get_logger
from picofader.core.types import (
    OutboundMessage, Phase, PointerEvent, PointerPhase, SliderView,
)
from picofader.geometry.track import (
    Track, closest_stop_index, segment_name_at, stop_index_at,
)
from picofader.interpreter.emission import (
    OnceLatch, Throttle,
    classify_gesture, gesture_message, position_message, sequence_message,
)
from picofader.motion.cursor_pair import CursorPair
from picofader.motion.frame_task import FrameTask
from picofader.motion.tween import Tween

logger = get_logger("Controller")


@dataclass
class SettleJoin:
    """
    Head and tail settle tweens, joined explicitly.
    The head never finishes before the tail: head duration = max(min, tail).
    """
    stop_index: int
    target: float
    head: Tween
    tail: Tween
    head_done: bool = False
    tail_done: bool = False

    def __post_init__(self) -> None:
        assert self.head.duration_s >= self.tail.duration_s

    @property
    def joined(self) -> bool:
        return self.head_done and self.tail_done


class SliderController:
    """
    Deterministic gesture-to-message engine.
    Pointer events go through process(), the animation clock through tick().
    Both return the outbound messages produced by that step.
    """

    def __init__(self, preset: Preset, width: float = 0.0) -> None:
        self.preset = preset
        self.phase: Phase = Phase.IDLE

        tt = preset.track
        self.track = Track(0.0, tt.handle_size, tt.stop_count)
        self.pair = CursorPair(track=self.track, chase=preset.chase)

        self._chase = FrameTask(self._chase_frame)
        self._settle: Optional[SettleJoin] = None

        self._throttle = Throttle(interval_ms=preset.emission.throttle_ms)
        self._initial_position = OnceLatch()

        # activation flag per stop: clear deadline in ms, None when off
        self._active_until: List[Optional[int]] = [None] * tt.stop_count

        # gesture session
        self._start_pos: Optional[Tuple[float, float]] = None

        if width > 0:
            self.set_width(width, t_ms=0)

    # ---------------------- layout ----------------------

    def set_width(self, width: float, t_ms: int) -> None:
        tt = self.preset.track
        track = Track(max(0.0, float(width)), tt.handle_size, tt.stop_count)
        was_valid = self.track.valid
        self.track = track

        if not track.valid:
            # nothing position-dependent can run without a track
            self._stop_all()
            self.pair.track = track
            logger.debug("Track width 0, controller idle")
            return

        if not was_valid:
            self.pair.track = track
            self.pair.rest_at(track.width * self.preset.emission.resting_value)
            logger.debug(f"Track ready: width={track.width:.0f} stops={track.stops}")
            return

        resting_stop = None
        tol = self.preset.settle.coincide_tol_px
        if self.phase == Phase.IDLE and abs(self.pair.head - self.pair.tail) < tol:
            resting_stop = stop_index_at(self.pair.track.stops, self.pair.tail, tol)

        self.pair.rescale(track)
        if resting_stop is not None:
            self.pair.rest_at(track.stops[resting_stop])
        elif self.phase == Phase.DRAGGING:
            self.pair.set_head(self.pair.head)
        elif self.phase == Phase.SETTLING:
            # re-target the new stop positions from where we are now
            self._begin_settle(t_ms)

    # ---------------------- pointer input ----------------------

    def process(self, ev: PointerEvent) -> list[OutboundMessage]:
        if not self.track.valid:
            return []

        if ev.phase == PointerPhase.DOWN:
            return self._on_down(ev)
        if ev.phase == PointerPhase.MOVE:
            if self.phase == Phase.DRAGGING:
                self.pair.set_head(ev.x)
            return []
        if ev.phase == PointerPhase.UP:
            return self._on_up(ev)
        if ev.phase == PointerPhase.CANCEL:
            if self.phase != Phase.IDLE:
                logger.debug(f"Gesture cancelled in {self.phase.value}")
            self._stop_all()
        return []

    def _on_down(self, ev: PointerEvent) -> list[OutboundMessage]:
        if self.phase == Phase.DRAGGING:
            # single gesture at a time
            logger.debug("Ignoring pointer down during an active drag")
            return []

        self._settle = None
        self.pair.tail_velocity = 0.0
        self.pair.set_head(ev.x)
        self._start_pos = (ev.x, ev.y)
        self.phase = Phase.DRAGGING
        self._chase.start(ev.t_ms)
        logger.debug(f"DRAGGING from x={ev.x:.1f} (tail={self.pair.tail:.1f})")
        return []

    def _on_up(self, ev: PointerEvent) -> list[OutboundMessage]:
        if self.phase != Phase.DRAGGING:
            return []

        out: list[OutboundMessage] = []
        self._chase.cancel()
        self.pair.set_head(ev.x)
        self._begin_settle(ev.t_ms)

        if self.preset.legacy_gestures:
            out.extend(self._legacy_gesture(ev))
        self._start_pos = None
        return out

    def _legacy_gesture(self, ev: PointerEvent) -> list[OutboundMessage]:
        sx, sy = self._start_pos if self._start_pos is not None else (ev.x, ev.y)
        if ev.offset is not None:
            dx, dy = ev.offset
        else:
            dx, dy = ev.x - sx, ev.y - sy
        direction = classify_gesture(dx, dy, self.preset.gesture.min_drag_px)
        segment = segment_name_at(sx, self.track.width)
        return [gesture_message(ev.t_ms, segment, direction, self.preset.emission.control_topic)]

    # ---------------------- animation clock ----------------------

    def tick(self, t_ms: int) -> list[OutboundMessage]:
        events: list[OutboundMessage] = []
        self._expire_activations(t_ms)
        if not self.track.valid:
            return events

        tail_before = self.pair.tail
        if self.phase == Phase.DRAGGING:
            self._chase.run_frame(t_ms)
        elif self.phase == Phase.SETTLING:
            events.extend(self._advance_settle(t_ms))

        if self.pair.tail != tail_before:
            events.extend(self._maybe_emit_position(t_ms))
        return events

    def _chase_frame(self, dt: float) -> bool:
        self.pair.chase_step(dt)
        return self.phase == Phase.DRAGGING

    # ---------------------- settling ----------------------

    def _begin_settle(self, t_ms: int) -> None:
        st = self.preset.settle
        stops = self.track.stops
        i = closest_stop_index(stops, self.pair.head)
        if i is None:
            self._stop_all()
            return
        target = stops[i]

        tail_d = abs(self.pair.tail - target) / st.speed_px_s if st.speed_px_s > 0 else 0.0
        head_d = max(st.head_min_s, tail_d)

        self._settle = SettleJoin(
            stop_index=i,
            target=target,
            head=Tween(self.pair.head, target, t_ms, head_d, ease_in_out),
            tail=Tween(self.pair.tail, target, t_ms, tail_d, linear),
        )
        self.pair.tail_velocity = 0.0
        self.phase = Phase.SETTLING
        logger.debug(f"SETTLING to stop {i} @ {target:.1f} (head {head_d:.2f}s, tail {tail_d:.2f}s)")

    def _advance_settle(self, t_ms: int) -> list[OutboundMessage]:
        j = self._settle
        if j is None:
            self.phase = Phase.IDLE
            return []

        if not j.head_done:
            self.pair.set_head(j.head.value(t_ms), clamp=False)
            j.head_done = j.head.done(t_ms)
        if not j.tail_done:
            self.pair.tail = j.tail.value(t_ms)
            j.tail_done = j.tail.done(t_ms)

        if not j.joined:
            return []

        self._settle = None
        self.phase = Phase.IDLE
        return self._evaluate_sequence(t_ms)

    def _evaluate_sequence(self, t_ms: int) -> list[OutboundMessage]:
        st = self.preset.settle
        span = self.pair.span
        head, tail = self.pair.head, self.pair.tail
        if abs(span.length - self.track.handle_size) >= st.coincide_tol_px:
            return []
        if abs(head - tail) >= st.coincide_tol_px:
            return []

        i = stop_index_at(self.track.stops, head, st.coincide_tol_px)
        if i is None:
            return []

        self._active_until[i] = t_ms + st.activation_ms
        msg = sequence_message(t_ms, i, self.preset.emission.control_topic)
        logger.info(f"Stop {i + 1} reached: {msg.payload}")
        return [msg]

    def _expire_activations(self, t_ms: int) -> None:
        for i, until in enumerate(self._active_until):
            if until is not None and t_ms >= until:
                self._active_until[i] = None

    # ---------------------- emission ----------------------

    def _maybe_emit_position(self, t_ms: int) -> list[OutboundMessage]:
        if not self._throttle.allow(t_ms):
            return []
        value = self.track.normalize(self.pair.tail)
        return [position_message(t_ms, value, self.preset.emission.fade_topic)]

    @property
    def initial_pending(self) -> bool:
        return not self._initial_position.fired

    def on_connected(self, t_ms: int) -> list[OutboundMessage]:
        """
        Resting position for a live link, until one has actually gone out.
        Call initial_published() once the link took it.
        """
        if self._initial_position.fired:
            return []
        return [position_message(t_ms, self.preset.emission.resting_value, self.preset.emission.fade_topic)]

    def initial_published(self) -> None:
        self._initial_position.fire()

    # ---------------------- lifecycle ----------------------

    def _stop_all(self) -> None:
        self._chase.cancel()
        self._settle = None
        self._start_pos = None
        self.pair.tail_velocity = 0.0
        self.phase = Phase.IDLE

    def teardown(self) -> None:
        self._stop_all()

    @property
    def chase_running(self) -> bool:
        return self._chase.running

    @property
    def active_stops(self) -> Tuple[bool, ...]:
        return tuple(until is not None for until in self._active_until)

    def view(self) -> SliderView:
        return SliderView(
            phase=self.phase,
            width=self.track.width,
            head=self.pair.head,
            tail=self.pair.tail,
            span=self.pair.span,
            stops=self.track.stops,
            active=self.active_stops,
        )
