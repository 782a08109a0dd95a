from __future__ import annotations
from pynput import keyboard
from picofader.core.control import ControlState
from picofader.core.logger import get_logger

logger = get_logger("Hotkeys")

CTRL_KEYS = {keyboard.Key.ctrl, keyboard.Key.ctrl_l, keyboard.Key.ctrl_r}
ALT_KEYS = {keyboard.Key.alt, keyboard.Key.alt_l, keyboard.Key.alt_r}


def link_status(state: ControlState) -> str:
    link = "link up" if state.is_connected() else "link down, fades dropped"
    fade = state.last_fade()
    last = "no fade yet" if fade is None else f"last fade {fade:.3f}"
    return f"{link}, {last}"


def on_chord(state: ControlState, key) -> None:
    """Ctrl+Alt+<key> handler: Space toggles publishing, Esc mutes it."""
    if key == keyboard.Key.space:
        enabled = state.toggle()
        logger.info(f"Publishing {'ON' if enabled else 'OFF'} (Ctrl+Alt+Space; {link_status(state)})")
    elif key == keyboard.Key.esc:
        state.set_enabled(False)
        logger.warning(f"Publishing muted (Ctrl+Alt+Esc; {link_status(state)})")


def run_hotkeys(state: ControlState) -> None:
    """Global hotkeys (X11), blocking; run it on its own thread."""
    pressed = set()

    def on_press(k):
        pressed.add(k)
        if pressed & CTRL_KEYS and pressed & ALT_KEYS:
            on_chord(state, k)

    def on_release(k):
        pressed.discard(k)

    with keyboard.Listener(on_press=on_press, on_release=on_release) as listener:
        listener.join()
