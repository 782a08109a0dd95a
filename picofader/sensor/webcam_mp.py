from __future__ import annotations

import time
from dataclasses import dataclass

import cv2
import mediapipe as mp

from picofader.core.logger import get_logger
from picofader.core.types import PointerEvent, PointerPhase

logger = get_logger("WebcamSource")


def _dist(a, b):
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return (dx*dx + dy*dy + dz*dz) ** 0.5


@dataclass
class WebcamPinchSource:
    """
    Hand as a pointer: index MCP (landmark 5) gives x/y across the track,
    a thumb–index pinch is the button. Pinch uses hysteresis so the press
    does not flap at the threshold.
    """
    width: float
    height: float = 60.0
    cam_index: int = 0
    mirror: bool = True
    pinch_on: float = 0.75
    pinch_off: float = 0.55
    show_preview: bool = True

    def __post_init__(self) -> None:
        self.cap = cv2.VideoCapture(self.cam_index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, 1280)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, 720)

        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=1,
            model_complexity=1,
            min_detection_confidence=0.6,
            min_tracking_confidence=0.6,
        )
        self.mp_draw = mp.solutions.drawing_utils
        self.finished = False
        self._pinched = False
        self._x = 0.0
        self._y = 0.0

    def poll(self, t_ms: int) -> list[PointerEvent]:
        ok, frame = self.cap.read()
        if not ok:
            return []

        if self.mirror:
            frame = cv2.flip(frame, 1)

        res = self.hands.process(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        out: list[PointerEvent] = []
        now = int(time.monotonic() * 1000)

        if not res.multi_hand_landmarks:
            # hand left the frame mid-gesture
            if self._pinched:
                self._pinched = False
                out.append(PointerEvent(t_ms=now, phase=PointerPhase.CANCEL, x=self._x, y=self._y))
            self._show(frame, None)
            return out

        lm = res.multi_hand_landmarks[0].landmark
        self._x = max(0.0, min(1.0, float(lm[5].x))) * self.width
        self._y = max(0.0, min(1.0, float(lm[5].y))) * self.height

        # normalize pinch distance by palm size (index MCP ↔ pinky MCP)
        palm = _dist(lm[5], lm[17]) + 1e-6
        pinch = max(0.0, min(1.0, 1.0 - (_dist(lm[4], lm[8]) / palm)))

        if self._pinched:
            if pinch <= self.pinch_off:
                self._pinched = False
                out.append(PointerEvent(t_ms=now, phase=PointerPhase.UP, x=self._x, y=self._y))
            else:
                out.append(PointerEvent(t_ms=now, phase=PointerPhase.MOVE, x=self._x, y=self._y))
        elif pinch >= self.pinch_on:
            self._pinched = True
            out.append(PointerEvent(t_ms=now, phase=PointerPhase.DOWN, x=self._x, y=self._y))

        self.mp_draw.draw_landmarks(frame, res.multi_hand_landmarks[0], self.mp_hands.HAND_CONNECTIONS)
        self._show(frame, pinch)
        return out

    def _show(self, frame, pinch) -> None:
        if not self.show_preview:
            return
        label = "NO HAND" if pinch is None else f"{'PINCH' if self._pinched else 'OPEN'} pinch={pinch:.2f} x={self._x:.0f}"
        cv2.rectangle(frame, (10, 10), (520, 70), (0, 0, 0), -1)
        cv2.putText(frame, label, (20, 50), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (255, 255, 255), 2, cv2.LINE_AA)
        cv2.imshow("PicoFader (Webcam)", frame)
        if (cv2.waitKey(1) & 0xFF) == 27:  # ESC
            self.finished = True

    def close(self) -> None:
        self.finished = True
        self.hands.close()
        self.cap.release()
        if self.show_preview:
            cv2.destroyAllWindows()
