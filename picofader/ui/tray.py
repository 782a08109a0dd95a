from __future__ import annotations

import threading
import time

import pystray
from PIL import Image, ImageDraw

from picofader.core.control import ControlState
from picofader.core.logger import get_logger
from picofader.geometry.track import gradient_color_at

logger = get_logger("Tray")


def make_icon(fade: float | None, live: bool) -> Image.Image:
    # ring + dot in the gradient color of the last published fade value
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    d.ellipse((8, 8, 56, 56), outline=(255, 255, 255, 220), width=3)

    r, g, b = gradient_color_at(0.5 if fade is None else fade)
    alpha = 255 if live else 70
    d.ellipse((20, 20, 44, 44), fill=(r, g, b, alpha))
    return img


def tray_title(state: ControlState) -> str:
    output = "ON" if state.is_enabled() else "OFF"
    link = "connected" if state.is_connected() else "offline"
    last = state.last_message() or "None"
    return f"PicoFader ({output}, {link}) Last Message: {last}"


def run_tray(state: ControlState, stop_flag: threading.Event) -> None:
    icon = pystray.Icon("PicoFader")

    def update_icon():
        icon.icon = make_icon(state.last_fade(), state.is_enabled() and state.is_connected())
        icon.title = tray_title(state)

    def on_toggle(_icon, _item):
        state.toggle()
        update_icon()

    def on_off(_icon, _item):
        state.set_enabled(False)
        update_icon()

    def on_on(_icon, _item):
        state.set_enabled(True)
        update_icon()

    def on_quit(_icon, _item):
        stop_flag.set()
        icon.stop()

    icon.menu = pystray.Menu(
        pystray.MenuItem("Toggle output (ON/OFF)", on_toggle),
        pystray.MenuItem("Output ON", on_on),
        pystray.MenuItem("Output OFF", on_off),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Quit", on_quit),
    )

    update_icon()

    # keeps icon fresh for hotkey toggles, link changes and new fade values
    def watcher():
        last = None
        while not stop_flag.is_set():
            cur = (state.is_enabled(), state.is_connected(), state.last_fade(), state.last_message())
            if cur != last:
                update_icon()
                last = cur
            time.sleep(0.2)

    threading.Thread(target=watcher, daemon=True).start()
    try:
        icon.run()
    except Exception as exc:
        # Tray backends can be fragile; the run loop keeps going headless.
        logger.error(f"Tray backend crashed: {exc}")
