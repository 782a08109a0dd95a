from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional, Protocol

from picofader.core.config import Preset
from picofader.core.logger import get_logger
from picofader.core.types import OutboundMessage, PointerEvent, PointerPhase
from picofader.interpreter.state_machine import SliderController
from picofader.runtime.output_gate import OutputGate

logger = get_logger("RunLoop")


def now_ms() -> int:
    return int(time.monotonic() * 1000)


class PointerSource(Protocol):
    finished: bool

    def poll(self, t_ms: int) -> list[PointerEvent]: ...

    def close(self) -> None: ...


@dataclass
class FakeSource:
    """
    Deterministic fake pointer to validate runtime wiring.
    Every cycle: press at `from_x`, drag to `to_x` over `drag_ms`, release,
    then leave the slider alone until the cycle restarts.
    """
    start_ms: int
    from_x: float = 100.0
    to_x: float = 301.0
    drag_ms: int = 500
    cycle_ms: int = 8000
    finished: bool = False

    _down: bool = False
    _cycle: int = -1

    def poll(self, t_ms: int) -> list[PointerEvent]:
        elapsed = t_ms - self.start_ms
        cycle, phase_ms = divmod(elapsed, self.cycle_ms)
        out: list[PointerEvent] = []

        if cycle != self._cycle and not self._down:
            self._cycle = cycle
            self._down = True
            out.append(PointerEvent(t_ms=t_ms, phase=PointerPhase.DOWN, x=self.from_x))
            return out

        if self._down:
            if phase_ms >= self.drag_ms or cycle != self._cycle:
                self._down = False
                out.append(PointerEvent(t_ms=t_ms, phase=PointerPhase.UP, x=self.to_x,
                                        offset=(self.to_x - self.from_x, 0.0)))
            else:
                p = phase_ms / self.drag_ms
                x = self.from_x + (self.to_x - self.from_x) * p
                out.append(PointerEvent(t_ms=t_ms, phase=PointerPhase.MOVE, x=x))
        return out

    def close(self) -> None:
        self.finished = True


def step(ctrl: SliderController, gate: OutputGate, source: PointerSource, t_ms: int) -> list[OutboundMessage]:
    """One loop iteration: link state, resting publish, pointer input, animation clock, output."""
    gate.guard()

    out: list[OutboundMessage] = []
    if ctrl.initial_pending and gate.ready():
        initial = ctrl.on_connected(t_ms)
        # a muted or failed publish is retried on a later frame
        if all([gate.apply(m) for m in initial]):
            ctrl.initial_published()
        out.extend(initial)

    pending: list[OutboundMessage] = []
    for ev in source.poll(t_ms):
        pending.extend(ctrl.process(ev))
    pending.extend(ctrl.tick(t_ms))
    for msg in pending:
        gate.apply(msg)
    return out + pending


def run(
    preset: Preset,
    source: PointerSource,
    gate: OutputGate,
    width: float,
    frame_hz: float = 60.0,
    stop: Optional[threading.Event] = None,
) -> None:
    ctrl = SliderController(preset, width=width)
    stop = stop or threading.Event()
    period = 1.0 / max(frame_hz, 1.0)

    logger.info(f"Run loop at {frame_hz:.0f} Hz, track width {width:.0f}px. Ctrl+C to exit.")
    try:
        while not stop.is_set() and not source.finished:
            step(ctrl, gate, source, now_ms())
            time.sleep(period)
    except KeyboardInterrupt:
        logger.info("exiting")
    finally:
        # no chase frame may outlive the loop
        ctrl.teardown()
        source.close()
