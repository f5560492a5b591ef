"""Kafka implementation of NotificationSink.

Key points:

1) The producer is created once and reused
Creating a producer is relatively heavy; main.py builds one sink at startup.

2) Delivery acknowledgement
`produce()` only queues the message locally. Delivery is confirmed later via
the delivery callback, so each publish calls `flush()` with a timeout. If
messages are still queued when the timeout expires the event counts as
undelivered and NotificationDeliveryError is raised. The same happens when
the broker reports an error for the message through the callback.

3) Message key
The customer id is the key: same customer -> same partition, so events for
one customer keep their order.

4) Envelope
Every message is a CustomerEvent (eventId, eventType, eventVersion,
timestamp, payload) serialized as JSON.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from confluent_kafka import KafkaException, Producer

from .config import KAFKA_BOOTSTRAP_SERVERS, KAFKA_FLUSH_TIMEOUT_SEC, KAFKA_TOPIC_PREFIX
from .errors import NotificationDeliveryError
from .logger import get_logger
from .models import CustomerEvent
from .notifications import NotificationSink

log = get_logger(__name__)


def create_producer(bootstrap_servers: str = KAFKA_BOOTSTRAP_SERVERS) -> Producer:
    """Create and configure a Confluent Kafka Producer."""
    conf: dict[str, Any] = {
        "bootstrap.servers": bootstrap_servers,
        # Safe against duplicates when the client retries internally.
        "enable.idempotence": True,
    }
    return Producer(conf)


def _delivery_report(err, msg) -> None:
    """Delivery callback, invoked from poll()/flush()."""
    if err is not None:
        log.warning("kafka_delivery_failed", error=str(err))
    else:
        log.info(
            "kafka_delivered",
            topic=msg.topic(),
            partition=msg.partition(),
            offset=msg.offset(),
        )


def _message_key(payload: Any) -> bytes | None:
    if isinstance(payload, dict):
        customer_id = payload.get("id")
    else:
        customer_id = payload
    if customer_id is None:
        return None
    return str(customer_id).encode("utf-8")


def build_event(topic: str, payload: Any) -> CustomerEvent:
    return CustomerEvent(
        eventId=str(uuid4()),
        eventType=topic,
        timestamp=datetime.now(timezone.utc).isoformat(),
        payload=payload,
    )


class KafkaNotificationSink(NotificationSink):
    def __init__(
        self,
        producer: Producer,
        topic_prefix: str = KAFKA_TOPIC_PREFIX,
        flush_timeout: float = KAFKA_FLUSH_TIMEOUT_SEC,
    ) -> None:
        self.producer = producer
        self.topic_prefix = topic_prefix
        self.flush_timeout = flush_timeout

    def publish(self, topic: str, payload: Any) -> None:
        event = build_event(topic, payload)
        value: bytes = json.dumps(event.model_dump(mode="json")).encode("utf-8")
        target = f"{self.topic_prefix}{topic}"

        errors = []

        def on_delivery(err, msg):
            _delivery_report(err, msg)
            if err is not None:
                errors.append(err)

        try:
            self.producer.produce(
                topic=target,
                key=_message_key(payload),
                value=value,
                callback=on_delivery,
            )
            remaining = self.producer.flush(self.flush_timeout)
        except (KafkaException, BufferError) as e:
            raise NotificationDeliveryError(f"Failed to produce to {target}: {e}") from e

        if remaining:
            raise NotificationDeliveryError(
                f"{remaining} message(s) to {target} not delivered within {self.flush_timeout}s"
            )
        if errors:
            raise NotificationDeliveryError(f"Delivery to {target} failed: {errors[0]}")

    def close(self) -> None:
        self.producer.flush(self.flush_timeout)
