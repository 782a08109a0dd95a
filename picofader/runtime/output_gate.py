from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from picofader.core.control import ControlState
from picofader.core.logger import get_logger
from picofader.core.types import MessageKind, OutboundMessage

logger = get_logger("OutputGate")


class Publisher(Protocol):
    def publish(self, msg: OutboundMessage) -> bool: ...


@dataclass
class OutputGate:
    """
    Central output gate.
    While ControlState is OFF nothing reaches the link.
    Also watches the connection flag so the loop can react to a fresh connect.
    """
    state: ControlState
    link: Publisher

    _last_enabled: bool = True
    _last_connected: bool = False

    def guard(self) -> bool:
        """Observe flag transitions. Returns True on a disconnected -> connected edge."""
        enabled = self.state.is_enabled()
        if enabled != self._last_enabled:
            self._last_enabled = enabled
            logger.info(f"Output {'ON' if enabled else 'OFF'}")

        connected = self.state.is_connected()
        rose = connected and not self._last_connected
        if connected != self._last_connected:
            self._last_connected = connected
            logger.debug(f"Link {'up' if connected else 'down'}")
        return rose

    def allow(self) -> bool:
        return self.state.is_enabled()

    def ready(self) -> bool:
        """Enabled and connected: a publish now can actually reach the broker."""
        return self.state.is_enabled() and self.state.is_connected()

    def apply(self, msg: OutboundMessage) -> bool:
        """Publish msg ONLY if enabled. Returns whether the link took it."""
        if not self.allow():
            logger.debug(f"Output OFF, dropped {msg.payload}")
            return False

        if msg.kind == MessageKind.POSITION and msg.value is not None:
            self.state.set_last_fade(msg.value)
        else:
            self.state.set_last_message(msg.payload)
            logger.info(f"[{msg.kind.value}] {msg.payload}")

        return self.link.publish(msg)
