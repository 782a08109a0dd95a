from __future__ import annotations

import time
from typing import Optional

from evdev import InputDevice, ecodes as e

from picofader.core.logger import get_logger
from picofader.core.types import PointerEvent, PointerPhase

logger = get_logger("TouchSource")


def _scale(value: int, lo: int, hi: int, size: float) -> float:
    if hi <= lo:
        return 0.0
    return (value - lo) / float(hi - lo) * size


class TouchSource:
    """
    Single-finger touchscreen reader (Linux evdev).
    The whole panel width maps onto the track width.
    Samples are collected per SYN_REPORT so one report = one PointerEvent.
    """

    def __init__(self, path: str, width: float, height: float = 60.0) -> None:
        self.dev = InputDevice(path)
        self.width = width
        self.height = height
        self.finished = False

        caps = self.dev.capabilities(absinfo=False).get(e.EV_ABS, [])
        self._code_x = e.ABS_MT_POSITION_X if e.ABS_MT_POSITION_X in caps else e.ABS_X
        self._code_y = e.ABS_MT_POSITION_Y if e.ABS_MT_POSITION_Y in caps else e.ABS_Y
        self._info_x = self.dev.absinfo(self._code_x)
        self._info_y = self.dev.absinfo(self._code_y) if self._code_y in caps else None

        self._x = 0.0
        self._y = 0.0
        self._touching = False
        self._pending: Optional[PointerPhase] = None
        self._moved = False
        logger.info(f"Reading touch from {path} ({self.dev.name})")

    def poll(self, t_ms: int) -> list[PointerEvent]:
        out: list[PointerEvent] = []
        try:
            for ev in self.dev.read():
                self._handle(ev, out)
        except BlockingIOError:
            pass
        except OSError as exc:
            logger.error(f"Touch device lost: {exc}")
            if self._touching:
                out.append(self._event(PointerPhase.CANCEL))
            self._touching = False
            self.finished = True
        return out

    def _handle(self, ev, out: list[PointerEvent]) -> None:
        if ev.type == e.EV_KEY and ev.code == e.BTN_TOUCH:
            if ev.value and not self._touching:
                self._pending = PointerPhase.DOWN
            elif not ev.value and self._touching:
                self._pending = PointerPhase.UP
        elif ev.type == e.EV_ABS:
            if ev.code == self._code_x:
                self._x = _scale(ev.value, self._info_x.min, self._info_x.max, self.width)
                self._moved = True
            elif ev.code == self._code_y and self._info_y is not None:
                self._y = _scale(ev.value, self._info_y.min, self._info_y.max, self.height)
                self._moved = True
        elif ev.type == e.EV_SYN and ev.code == e.SYN_REPORT:
            if self._pending is not None:
                self._touching = self._pending == PointerPhase.DOWN
                out.append(self._event(self._pending))
                self._pending = None
            elif self._moved and self._touching:
                out.append(self._event(PointerPhase.MOVE))
            self._moved = False

    def _event(self, phase: PointerPhase) -> PointerEvent:
        return PointerEvent(t_ms=int(time.monotonic() * 1000), phase=phase, x=self._x, y=self._y)

    def close(self) -> None:
        self.finished = True
        try:
            self.dev.close()
        except OSError:
            pass
