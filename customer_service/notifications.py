"""NotificationSink interface and the log-only sink.

Delivery is best-effort (at most once). A sink may raise; CustomerOperations
catches and logs every failure so a broken broker never fails a write.
The Kafka sink lives in kafka_producer.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .logger import get_logger

CUSTOMER_CREATED = "customer.created"
CUSTOMER_UPDATED = "customer.updated"
CUSTOMER_DELETED = "customer.deleted"

log = get_logger(__name__)


class NotificationSink(ABC):
    @abstractmethod
    def publish(self, topic: str, payload: Any) -> None:
        """Publish `payload` on `topic`."""


class LoggingNotificationSink(NotificationSink):
    """Writes events to the log instead of a broker. For local runs."""

    def publish(self, topic: str, payload: Any) -> None:
        log.info("notification_logged", topic=topic, payload=payload)
