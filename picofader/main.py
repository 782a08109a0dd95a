from __future__ import annotations

import argparse
import threading
import time
from dataclasses import replace

from picofader.core.config import BrokerSettings, PRESETS, PresetName, RuntimeSettings
from picofader.core.control import ControlState
from picofader.core.logger import setup_logging
from picofader.runtime.output_gate import OutputGate
from picofader.runtime.profile import apply_profile, load_profile, profile_from, save_profile
from picofader.runtime.run_loop import FakeSource, now_ms, run
from picofader.transport.mqtt_link import MqttLink


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="picofader", description="Gesture slider → MQTT controller for the Pico rig.")
    p.add_argument("--source", choices=("fake", "mouse", "touch", "webcam"), default="fake",
                   help="pointer input (default: scripted fake drag)")
    p.add_argument("--preset", choices=[n.value for n in PresetName], default=PresetName.DEFAULT.value)
    p.add_argument("--width", type=float, default=None, help="track width in pixels")
    p.add_argument("--legacy", action="store_true", help="also publish legacy geste_* messages")
    p.add_argument("--subscribe", action="store_true", help="subscribe to the control topic and log inbound messages")
    p.add_argument("--no-tray", action="store_true")
    p.add_argument("--no-hotkeys", action="store_true")
    p.add_argument("--debug", action="store_true")
    p.add_argument("--save-profile", action="store_true",
                   help="write the effective settings to the profile file and exit")
    return p.parse_args(argv)


def make_source(name: str, runtime: RuntimeSettings, width: float):
    # adapters import their backends lazily; only the chosen one must be installed
    if name == "mouse":
        from picofader.sensor.mouse_pynput import MouseSource
        return MouseSource(runtime.region)
    if name == "touch":
        from picofader.sensor.touch_evdev import TouchSource
        return TouchSource(runtime.touch_device, width)
    if name == "webcam":
        from picofader.sensor.webcam_mp import WebcamPinchSource
        return WebcamPinchSource(width=width, cam_index=runtime.cam_index)
    return FakeSource(start_ms=now_ms())


def main(argv=None) -> None:
    args = parse_args(argv)
    logger = setup_logging(debug=args.debug)

    preset, broker, runtime = apply_profile(load_profile(), PRESETS[PresetName(args.preset)], BrokerSettings(), RuntimeSettings())
    if args.legacy:
        preset = replace(preset, legacy_gestures=True)
    if args.subscribe:
        broker = replace(broker, subscribe_control=True)
    width = args.width if args.width is not None else (
        runtime.region.width if args.source == "mouse" else runtime.container_width
    )

    if args.save_profile:
        if args.width is not None:
            runtime = replace(runtime, container_width=args.width)
        path = save_profile(profile_from(preset, broker, runtime))
        logger.info(f"Profile saved to {path}")
        return

    state = ControlState(_enabled=True)
    stop = threading.Event()

    link = MqttLink(broker, state, control_topic=preset.emission.control_topic)
    gate = OutputGate(state=state, link=link)

    if not args.no_hotkeys:
        try:
            from picofader.ui.hotkeys import run_hotkeys
            threading.Thread(target=run_hotkeys, args=(state,), daemon=True).start()
            logger.info("Hotkeys: Ctrl+Alt+Space toggle output, Ctrl+Alt+Esc mute")
        except ImportError as exc:
            logger.warning(f"Hotkeys unavailable: {exc}")

    if not args.no_tray:
        try:
            from picofader.ui.tray import run_tray
            threading.Thread(target=run_tray, args=(state, stop), daemon=True).start()
        except Exception as exc:
            logger.warning(f"Tray unavailable (missing backend): {exc}")

    link.start()
    try:
        source = make_source(args.source, runtime, width)
        logger.info(f"PicoFader started: source={args.source} preset={preset.name.value} legacy={preset.legacy_gestures}")
        run(preset, source, gate, width=width, frame_hz=runtime.frame_hz, stop=stop)
    finally:
        stop.set()
        # give an in-flight publish a moment before the socket goes away
        time.sleep(0.1)
        link.stop()


if __name__ == "__main__":
    main()
