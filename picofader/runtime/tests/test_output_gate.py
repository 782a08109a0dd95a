from dataclasses import dataclass, field

from picofader.core.config import DEFAULT_PRESET
from picofader.core.control import ControlState
from picofader.core.types import MessageKind, OutboundMessage, PointerPhase
from picofader.interpreter.state_machine import SliderController
from picofader.runtime.output_gate import OutputGate
from picofader.runtime.run_loop import FakeSource, step


@dataclass
class FakeLink:
    state: ControlState
    sent: list = field(default_factory=list)

    def publish(self, msg):
        if not self.state.is_connected():
            return False
        self.sent.append(msg)
        return True


def msg(kind=MessageKind.POSITION, payload="0.250", value=0.25):
    return OutboundMessage(t_ms=0, kind=kind, topic="t", payload=payload, value=value)


def gate():
    state = ControlState()
    lk = FakeLink(state)
    return OutputGate(state=state, link=lk), state, lk


def test_guard_reports_connect_edge_once():
    g, state, _ = gate()
    assert g.guard() is False
    state.set_connected(True)
    assert g.guard() is True
    assert g.guard() is False
    state.set_connected(False)
    assert g.guard() is False
    state.set_connected(True)
    assert g.guard() is True


def test_output_off_drops_everything():
    g, state, lk = gate()
    state.set_connected(True)
    state.set_enabled(False)
    assert g.apply(msg()) is False
    assert lk.sent == []
    assert state.last_fade() is None

    state.toggle()
    assert g.apply(msg()) is True
    assert state.last_fade() == 0.25


def test_disconnected_link_is_not_an_error():
    g, state, lk = gate()
    assert g.apply(msg(kind=MessageKind.SEQUENCE, payload="Initialize Sequence 2", value=None)) is False
    assert lk.sent == []


def test_fake_source_scripts_a_full_drag():
    src = FakeSource(start_ms=0, from_x=100, to_x=301, drag_ms=500, cycle_ms=8000)
    phases = []
    for t in range(0, 8001, 16):
        phases.extend(ev.phase for ev in src.poll(t))
    assert phases[0] == PointerPhase.DOWN
    assert phases.count(PointerPhase.UP) == 1
    assert phases.count(PointerPhase.DOWN) == 2
    assert PointerPhase.MOVE in phases


def test_loop_step_publishes_resting_value_on_first_connect():
    g, state, lk = gate()
    ctrl = SliderController(DEFAULT_PRESET, width=630)
    src = FakeSource(start_ms=0)

    step(ctrl, g, src, 0)
    assert lk.sent == []

    state.set_connected(True)
    step(ctrl, g, src, 16)
    assert [m.payload for m in lk.sent][:1] == ["0.500"]

    # reconnect does not repeat it
    state.set_connected(False)
    step(ctrl, g, src, 32)
    state.set_connected(True)
    sent_before = len(lk.sent)
    out = step(ctrl, g, src, 48)
    assert not any(m.payload == "0.500" and m.t_ms == 48 for m in out)
    assert len(lk.sent) >= sent_before


def test_control_payloads_become_the_last_message():
    g, state, lk = gate()
    state.set_connected(True)
    g.apply(msg(kind=MessageKind.SEQUENCE, payload="Initialize Sequence 4", value=None))
    assert state.last_message() == "Initialize Sequence 4"

    # fades update the fade readout only
    g.apply(msg(payload="0.731", value=0.731))
    assert state.last_message() == "Initialize Sequence 4"
    assert state.last_fade() == 0.731

    state.set_enabled(False)
    g.apply(msg(kind=MessageKind.GESTURE, payload="geste_mint_tap", value=None))
    assert state.last_message() == "Initialize Sequence 4"


def test_resting_value_waits_for_output_to_be_unmuted():
    g, state, lk = gate()
    ctrl = SliderController(DEFAULT_PRESET, width=630)
    src = FakeSource(start_ms=0, cycle_ms=60_000)

    state.set_enabled(False)
    state.set_connected(True)
    step(ctrl, g, src, 0)
    step(ctrl, g, src, 16)
    assert lk.sent == []
    assert ctrl.initial_pending

    state.set_enabled(True)
    step(ctrl, g, src, 32)
    assert [m.payload for m in lk.sent][:1] == ["0.500"]
    assert not ctrl.initial_pending

    step(ctrl, g, src, 48)
    assert len([m for m in lk.sent if m.value == 0.5]) == 1


def test_ready_needs_output_and_link():
    g, state, _ = gate()
    assert not g.ready()
    state.set_connected(True)
    assert g.ready()
    state.set_enabled(False)
    assert not g.ready()
