"""
PicoFader: Defaults (Presets)

All tuneable knobs live here. Profile overrides are merged in by
picofader.runtime.profile.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


PIXELS_PER_CM = 37.8
SPEED_CM_PER_S = 1.0

CONTROL_TOPIC = "zotac/pico/control"
FADE_TOPIC = "zotac/pico/fading"

SEGMENT_NAMES: Tuple[str, ...] = (
    "rose", "pfirsich", "creme", "mint", "himmelblau", "lavendel", "flieder",
)
KEY_COLORS: Tuple[Tuple[int, int, int], ...] = (
    (255, 191, 204),  # rose
    (255, 217, 184),  # pfirsich
    (255, 250, 204),  # creme
    (153, 250, 153),  # mint
    (135, 206, 235),  # himmelblau
    (230, 230, 250),  # lavendel
    (204, 159, 227),  # flieder
)

LOG_FILENAME = "picofader.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3


class PresetName(str, Enum):
    DEFAULT = "Default"
    SNAPPY = "Snappy"


@dataclass(frozen=True)
class TrackTuning:
    handle_size: float = 30.0
    stop_count: int = 7


@dataclass(frozen=True)
class ChaseTuning:
    max_speed_px_s: float = PIXELS_PER_CM * SPEED_CM_PER_S
    stiffness: float = 4.0        # k in 1 - e^(-k*dt)
    deadband_px: float = 1.0


@dataclass(frozen=True)
class SettleTuning:
    speed_px_s: float = PIXELS_PER_CM * SPEED_CM_PER_S
    head_min_s: float = 3.0
    coincide_tol_px: float = 1.0
    activation_ms: int = 500


@dataclass(frozen=True)
class EmissionTuning:
    throttle_ms: int = 50
    resting_value: float = 0.5
    control_topic: str = CONTROL_TOPIC
    fade_topic: str = FADE_TOPIC


@dataclass(frozen=True)
class GestureTuning:
    min_drag_px: float = 50.0


@dataclass(frozen=True)
class Preset:
    name: PresetName
    track: TrackTuning = TrackTuning()
    chase: ChaseTuning = ChaseTuning()
    settle: SettleTuning = SettleTuning()
    emission: EmissionTuning = EmissionTuning()
    gesture: GestureTuning = GestureTuning()
    legacy_gestures: bool = False


@dataclass(frozen=True)
class BrokerSettings:
    host: str = "broker.emqx.io"
    port: int = 8084
    path: str = "/mqtt"
    transport: str = "websockets"
    tls: bool = True
    username: str = ""
    password: str = ""
    keepalive_s: int = 60
    reconnect_min_s: int = 1
    reconnect_max_s: int = 30
    subscribe_control: bool = False
    client_id: str = ""


@dataclass(frozen=True)
class TrackRegion:
    """Screen rectangle (pixels) the mouse adapter maps onto the track."""
    left: int = 0
    top: int = 0
    width: int = 630
    height: int = 60


@dataclass(frozen=True)
class RuntimeSettings:
    frame_hz: float = 60.0
    container_width: float = 630.0
    region: TrackRegion = field(default_factory=TrackRegion)
    touch_device: str = "/dev/input/event0"
    cam_index: int = 0


DEFAULT_PRESET = Preset(name=PresetName.DEFAULT)

# Faster chase for bench testing the rig; snapping rules are unchanged.
SNAPPY_PRESET = Preset(
    name=PresetName.SNAPPY,
    chase=ChaseTuning(max_speed_px_s=4 * PIXELS_PER_CM, stiffness=8.0),
    settle=SettleTuning(speed_px_s=4 * PIXELS_PER_CM, head_min_s=1.0),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.SNAPPY: SNAPPY_PRESET,
}
