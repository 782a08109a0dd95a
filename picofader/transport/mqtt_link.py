"""
MQTT link to the actuator rig.

Callbacks run on the paho network thread and only touch ControlState flags.
Publishing is fire-and-forget: when the link is down the message is dropped
with a warning and the next natural message tries again.
"""

from __future__ import annotations

from typing import Callable

import paho.mqtt.client as mqtt

from picofader.core.config import BrokerSettings, CONTROL_TOPIC
from picofader.core.control import ControlState
from picofader.core.logger import get_logger
from picofader.core.types import OutboundMessage

logger = get_logger("MqttLink")


def make_client(settings: BrokerSettings) -> mqtt.Client:
    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=settings.client_id,
        transport=settings.transport,
    )
    if settings.transport == "websockets":
        client.ws_set_options(path=settings.path)
    if settings.tls:
        client.tls_set()
    # empty credentials for anonymous access on public brokers
    client.username_pw_set(settings.username, settings.password)
    client.reconnect_delay_set(min_delay=settings.reconnect_min_s, max_delay=settings.reconnect_max_s)
    return client


class MqttLink:
    def __init__(
        self,
        settings: BrokerSettings,
        state: ControlState,
        client_factory: Callable[[BrokerSettings], mqtt.Client] = make_client,
        control_topic: str = CONTROL_TOPIC,
    ) -> None:
        self.settings = settings
        self.state = state
        self.control_topic = control_topic
        self.client = client_factory(settings)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message
        self.client.on_publish = self._on_publish
        self.client.on_subscribe = self._on_subscribe
        self._started = False

    # ---------------------- lifecycle ----------------------

    def start(self) -> None:
        url = f"{self.settings.host}:{self.settings.port}{self.settings.path}"
        logger.info(f"Connecting to MQTT broker: {url}")
        try:
            self.client.connect_async(self.settings.host, self.settings.port, keepalive=self.settings.keepalive_s)
            self.client.loop_start()
            self._started = True
        except (ValueError, OSError) as exc:
            logger.error(f"Failed to connect to MQTT broker: {exc}")

    def stop(self) -> None:
        if not self._started:
            return
        logger.info("Stopping MQTT client.")
        try:
            self.client.disconnect()
        except (ValueError, OSError) as exc:
            logger.warning(f"MQTT disconnect error: {exc}")
        self.client.loop_stop()
        self._started = False
        self.state.set_connected(False)

    # ---------------------- paho callbacks ----------------------

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            logger.error(f"MQTT connection refused: {reason_code}")
            self.state.set_connected(False)
            return
        logger.info("Connected to MQTT broker")
        self.state.set_connected(True)
        if self.settings.subscribe_control:
            client.subscribe(self.control_topic)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if self.state.is_connected():
            logger.warning(f"MQTT connection lost: {reason_code}")
        self.state.set_connected(False)

    def _on_subscribe(self, client, userdata, mid, reason_codes, properties=None) -> None:
        if any(rc.is_failure for rc in reason_codes):
            logger.error(f"MQTT subscribe error: {reason_codes}")
        else:
            logger.info(f"Subscribed to topic: {self.control_topic}")

    def _on_message(self, client, userdata, msg) -> None:
        text = msg.payload.decode("utf-8", errors="replace")
        logger.info(f"Received message: {text} on topic: {msg.topic}")
        self.state.set_last_message(text)

    def _on_publish(self, client, userdata, mid, reason_code, properties=None) -> None:
        logger.debug(f"Publish complete (mid={mid})")

    # ---------------------- publishing ----------------------

    def publish(self, msg: OutboundMessage) -> bool:
        """Hand the message to paho. Returns False when it was dropped."""
        if not self.state.is_connected():
            logger.warning(f"MQTT client not connected. Message not sent: {msg.payload}")
            return False
        try:
            info = self.client.publish(msg.topic, msg.payload.encode("utf-8"))
        except (ValueError, OSError) as exc:
            logger.error(f"MQTT publish error: {exc}")
            return False
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"MQTT publish error: {mqtt.error_string(info.rc)}")
            return False
        logger.debug(f"Published '{msg.payload}' to {msg.topic}")
        return True
