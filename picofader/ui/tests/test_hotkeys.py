import pytest

from picofader.core.control import ControlState

keyboard = pytest.importorskip("pynput.keyboard")
hotkeys = pytest.importorskip("picofader.ui.hotkeys")


def test_space_chord_toggles_publishing():
    state = ControlState(_enabled=True)
    hotkeys.on_chord(state, keyboard.Key.space)
    assert not state.is_enabled()
    hotkeys.on_chord(state, keyboard.Key.space)
    assert state.is_enabled()


def test_esc_chord_mutes_and_stays_muted():
    state = ControlState(_enabled=True)
    hotkeys.on_chord(state, keyboard.Key.esc)
    hotkeys.on_chord(state, keyboard.Key.esc)
    assert not state.is_enabled()


def test_link_status_reports_link_and_fade():
    state = ControlState()
    assert hotkeys.link_status(state) == "link down, fades dropped, no fade yet"
    state.set_connected(True)
    state.set_last_fade(0.25)
    assert hotkeys.link_status(state) == "link up, last fade 0.250"
