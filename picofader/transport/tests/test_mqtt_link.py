from dataclasses import dataclass, field

import paho.mqtt.client as mqtt

from picofader.core.config import BrokerSettings
from picofader.core.control import ControlState
from picofader.core.types import MessageKind, OutboundMessage
from picofader.transport.mqtt_link import MqttLink


@dataclass
class _Info:
    rc: int


@dataclass
class _Reason:
    is_failure: bool = False


@dataclass
class _Msg:
    topic: str
    payload: bytes


@dataclass
class FakeClient:
    rc: int = mqtt.MQTT_ERR_SUCCESS
    raise_on_publish: bool = False
    published: list = field(default_factory=list)
    subscribed: list = field(default_factory=list)
    loop_running: bool = False

    def connect_async(self, host, port, keepalive=60):
        self.target = (host, port)

    def loop_start(self):
        self.loop_running = True

    def loop_stop(self):
        self.loop_running = False

    def disconnect(self):
        pass

    def subscribe(self, topic):
        self.subscribed.append(topic)
        return (mqtt.MQTT_ERR_SUCCESS, 1)

    def publish(self, topic, payload):
        if self.raise_on_publish:
            raise ValueError("Invalid topic.")
        self.published.append((topic, payload))
        return _Info(rc=self.rc)


def link(**broker):
    state = ControlState()
    client = FakeClient()
    lk = MqttLink(BrokerSettings(**broker), state, client_factory=lambda s: client)
    return lk, state, client


def fade(payload="0.500"):
    return OutboundMessage(t_ms=0, kind=MessageKind.POSITION, topic="zotac/pico/fading", payload=payload, value=0.5)


def test_publish_is_a_no_op_while_disconnected():
    lk, state, client = link()
    assert lk.publish(fade()) is False
    assert client.published == []


def test_connect_callback_opens_publishing():
    lk, state, client = link()
    lk.start()
    assert client.loop_running
    assert client.target == ("broker.emqx.io", 8084)

    lk._on_connect(client, None, {}, _Reason(False), None)
    assert state.is_connected()
    assert lk.publish(fade("0.731")) is True
    assert client.published == [("zotac/pico/fading", b"0.731")]


def test_refused_connection_stays_offline():
    lk, state, client = link()
    lk._on_connect(client, None, {}, _Reason(True), None)
    assert not state.is_connected()
    assert lk.publish(fade()) is False


def test_publish_errors_are_swallowed():
    lk, state, client = link()
    lk._on_connect(client, None, {}, _Reason(False), None)

    client.rc = mqtt.MQTT_ERR_NO_CONN
    assert lk.publish(fade()) is False

    client.rc = mqtt.MQTT_ERR_SUCCESS
    client.raise_on_publish = True
    assert lk.publish(fade()) is False


def test_connection_loss_blocks_publishing_until_reconnect():
    lk, state, client = link()
    lk._on_connect(client, None, {}, _Reason(False), None)
    lk._on_disconnect(client, None, {}, _Reason(True), None)
    assert not state.is_connected()
    assert lk.publish(fade()) is False

    lk._on_connect(client, None, {}, _Reason(False), None)
    assert lk.publish(fade()) is True


def test_legacy_control_subscription():
    lk, state, client = link(subscribe_control=True)
    lk._on_connect(client, None, {}, _Reason(False), None)
    assert client.subscribed == ["zotac/pico/control"]

    lk._on_message(client, None, _Msg(topic="zotac/pico/control", payload=b"geste_mint_tap"))
    assert state.last_message() == "geste_mint_tap"


def test_no_subscription_by_default():
    lk, state, client = link()
    lk._on_connect(client, None, {}, _Reason(False), None)
    assert client.subscribed == []


def test_stop_marks_link_offline():
    lk, state, client = link()
    lk.start()
    lk._on_connect(client, None, {}, _Reason(False), None)
    lk.stop()
    assert not client.loop_running
    assert not state.is_connected()
