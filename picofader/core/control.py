from __future__ import annotations
from dataclasses import dataclass, field
from threading import Lock
from typing import Optional


@dataclass
class ControlState:
    """
    Shared control plane.
    enabled=False means output is muted (gate drops every message).
    connected/last_message are written from transport callbacks only.
    """
    _enabled: bool = True
    _connected: bool = False
    _last_message: str = ""
    _last_fade: Optional[float] = None
    _lock: Lock = field(default_factory=Lock, repr=False)

    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def set_enabled(self, value: bool) -> None:
        with self._lock:
            self._enabled = value

    def toggle(self) -> bool:
        with self._lock:
            self._enabled = not self._enabled
            return self._enabled

    def is_connected(self) -> bool:
        with self._lock:
            return self._connected

    def set_connected(self, value: bool) -> None:
        with self._lock:
            self._connected = value

    def last_message(self) -> str:
        with self._lock:
            return self._last_message

    def set_last_message(self, message: str) -> None:
        with self._lock:
            self._last_message = message

    def last_fade(self) -> Optional[float]:
        with self._lock:
            return self._last_fade

    def set_last_fade(self, value: float) -> None:
        with self._lock:
            self._last_fade = value
