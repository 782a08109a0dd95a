from __future__ import annotations

import json
import os
from dataclasses import asdict, fields, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from picofader.core.config import BrokerSettings, Preset, RuntimeSettings
from picofader.core.logger import get_logger

logger = get_logger("Profile")

PROFILE_ENV = "PICOFADER_PROFILE"


def _profile_path() -> Path:
    override = os.environ.get(PROFILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "picofader" / "profile.json"


def save_profile(data: dict) -> Path:
    p = _profile_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2))
    return p


def load_profile() -> Optional[dict]:
    p = _profile_path()
    if not p.exists():
        return None
    try:
        data = json.loads(p.read_text())
    except (OSError, ValueError) as exc:
        logger.warning(f"Ignoring unreadable profile {p}: {exc}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Ignoring profile {p}: expected a JSON object")
        return None
    return data


def _merge(obj, overrides: Optional[dict]):
    """replace() with only the keys the dataclass knows, nested dataclasses merged recursively."""
    if not overrides:
        return obj
    known = {f.name for f in fields(obj)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Unknown profile key: {type(obj).__name__}.{key}")
            continue
        current = getattr(obj, key)
        if isinstance(value, dict) and hasattr(current, "__dataclass_fields__"):
            changes[key] = _merge(current, value)
        elif isinstance(current, Enum):
            try:
                changes[key] = type(current)(value)
            except ValueError:
                logger.warning(f"Invalid profile value {type(obj).__name__}.{key}={value!r}")
        else:
            changes[key] = value
    return replace(obj, **changes)


def apply_profile(
    prof: Optional[dict],
    preset: Preset,
    broker: BrokerSettings = BrokerSettings(),
    runtime: RuntimeSettings = RuntimeSettings(),
) -> tuple[Preset, BrokerSettings, RuntimeSettings]:
    """
    Profile layout:
      {"preset": {...}, "broker": {...}, "runtime": {...}}
    """
    if not prof:
        return preset, broker, runtime
    return (
        _merge(preset, prof.get("preset")),
        _merge(broker, prof.get("broker")),
        _merge(runtime, prof.get("runtime")),
    )


def profile_from(preset: Preset, broker: BrokerSettings, runtime: RuntimeSettings) -> dict:
    """Effective settings in the layout apply_profile reads back."""
    return {"preset": asdict(preset), "broker": asdict(broker), "runtime": asdict(runtime)}
