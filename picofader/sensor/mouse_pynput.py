from __future__ import annotations

import queue
import time

from pynput import mouse

from picofader.core.config import TrackRegion
from picofader.core.logger import get_logger
from picofader.core.types import PointerEvent, PointerPhase

logger = get_logger("MouseSource")


class MouseSource:
    """
    Global mouse listener mapped onto a screen rectangle.
    Left press inside the rectangle starts a gesture; the gesture keeps
    tracking outside it until release.
    Listener callbacks run on the pynput thread and only enqueue.
    """

    def __init__(self, region: TrackRegion) -> None:
        self.region = region
        self.finished = False
        self._q: "queue.Queue[PointerEvent]" = queue.Queue()
        self._pressed = False
        self._listener = mouse.Listener(on_move=self._on_move, on_click=self._on_click)
        self._listener.start()
        logger.info(f"Listening for mouse on region {region}")

    def _local(self, x: float, y: float) -> tuple[float, float]:
        return float(x - self.region.left), float(y - self.region.top)

    def _inside(self, x: float, y: float) -> bool:
        r = self.region
        return r.left <= x < r.left + r.width and r.top <= y < r.top + r.height

    def _on_move(self, x, y) -> None:
        if not self._pressed:
            return
        lx, ly = self._local(x, y)
        self._q.put(PointerEvent(t_ms=int(time.monotonic() * 1000), phase=PointerPhase.MOVE, x=lx, y=ly))

    def _on_click(self, x, y, button, pressed) -> None:
        if button != mouse.Button.left:
            return
        t_ms = int(time.monotonic() * 1000)
        lx, ly = self._local(x, y)
        if pressed:
            if not self._inside(x, y):
                return
            self._pressed = True
            self._q.put(PointerEvent(t_ms=t_ms, phase=PointerPhase.DOWN, x=lx, y=ly))
        elif self._pressed:
            self._pressed = False
            self._q.put(PointerEvent(t_ms=t_ms, phase=PointerPhase.UP, x=lx, y=ly))

    def poll(self, t_ms: int) -> list[PointerEvent]:
        out: list[PointerEvent] = []
        while True:
            try:
                out.append(self._q.get_nowait())
            except queue.Empty:
                break
        if not self._listener.is_alive() and not self.finished:
            logger.warning("Mouse listener stopped")
            self.finished = True
        return out

    def close(self) -> None:
        self.finished = True
        self._listener.stop()
