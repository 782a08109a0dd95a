import pytest

from picofader.core.types import MessageKind
from picofader.interpreter.emission import (
    OnceLatch, Throttle,
    classify_gesture, format_fade, gesture_message, position_message, sequence_message,
)


def test_throttle_drops_inside_window():
    th = Throttle(interval_ms=50)
    allowed = [t for t in range(0, 1000, 10) if th.allow(t)]
    assert allowed == list(range(0, 1000, 50))


def test_throttle_window_counts_from_last_emission():
    th = Throttle(interval_ms=50)
    assert th.allow(0)
    assert not th.allow(49)
    assert th.allow(120)
    assert not th.allow(160)
    assert th.allow(170)
    th.reset()
    assert th.allow(171)


def test_once_latch():
    latch = OnceLatch()
    assert not latch.fired
    assert latch.fire()
    assert latch.fired
    assert not latch.fire()


@pytest.mark.parametrize("value,text", [
    (0.5, "0.500"),
    (0.0, "0.000"),
    (1.0, "1.000"),
    (0.12345, "0.123"),
    (1.7, "1.000"),
    (-0.2, "0.000"),
])
def test_fade_payload_format(value, text):
    assert format_fade(value) == text


def test_message_builders():
    p = position_message(10, 1.3, "zotac/pico/fading")
    assert p.kind == MessageKind.POSITION
    assert p.value == 1.0
    assert p.payload == "1.000"

    s = sequence_message(20, 0, "zotac/pico/control")
    assert s.kind == MessageKind.SEQUENCE
    assert s.payload == "Initialize Sequence 1"
    assert s.stop == 1

    g = gesture_message(30, "mint", "hoch", "zotac/pico/control")
    assert g.kind == MessageKind.GESTURE
    assert g.payload == "geste_mint_hoch"


@pytest.mark.parametrize("dx,dy,direction", [
    (2, 1, "tap"),
    (50, -50, "tap"),
    (51, 0, "rechts"),
    (-80, 20, "links"),
    (10, 90, "runter"),
    (-30, -120, "hoch"),
    (60, 60, "runter"),
])
def test_classify_gesture(dx, dy, direction):
    assert classify_gesture(dx, dy, 50) == direction
