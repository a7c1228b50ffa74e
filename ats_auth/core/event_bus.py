"""
Event Bus Producer
------------------
Outbound change notifications on the Kafka event bus.

The auth service only produces: a `USER_CREATED` event on the `user-events`
topic after a registration commits. Publishing is fire-and-forget; callers
wait for `produce()` to return, never for broker acknowledgement.
"""

import json
from typing import Any, Dict, Optional

from confluent_kafka import KafkaError, KafkaException, Producer
from loguru import logger

from ats_auth.core.config_manager import ApplicationSettings


class EventPublishError(Exception):
    """Raised when an event cannot be handed to the producer."""


class EventPublisher:
    """Interface for outbound event publication."""

    async def publish(self, topic: str, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release producer resources."""


def _delivery_report(err: Optional[KafkaError], msg) -> None:
    if err is not None:
        logger.error(f"Event delivery failed for key {msg.key()}: {err}")
    else:
        logger.debug(
            f"Event delivered to {msg.topic()} [{msg.partition()}] @ {msg.offset()}"
        )


class KafkaEventPublisher(EventPublisher):
    """EventPublisher backed by an idempotent confluent-kafka Producer."""

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str = "auth-service",
        producer: Optional[Producer] = None,
    ):
        self._producer = producer or Producer(
            {
                "bootstrap.servers": bootstrap_servers,
                "client.id": client_id,
                "enable.idempotence": True,
            }
        )

    @classmethod
    def from_settings(cls, app_settings: ApplicationSettings) -> "KafkaEventPublisher":
        return cls(app_settings.kafka_bootstrap_servers, app_settings.kafka_client_id)

    async def publish(self, topic: str, key: str, value: Dict[str, Any]) -> None:
        """
        Hand an event to the producer queue.

        Raises:
            EventPublishError: If the local queue is full or the producer rejects it
        """
        try:
            self._producer.produce(
                topic,
                key=key.encode("utf-8"),
                value=json.dumps(value, default=str).encode("utf-8"),
                on_delivery=_delivery_report,
            )
            # Serve delivery callbacks without blocking
            self._producer.poll(0)
        except (BufferError, KafkaException) as e:
            raise EventPublishError(f"Failed to publish to {topic}: {e}") from e

        logger.debug(f"Event queued on {topic} with key {key}")

    def close(self, timeout: float = 5.0) -> None:
        remaining = self._producer.flush(timeout)
        if remaining:
            logger.warning(f"{remaining} event(s) still undelivered at shutdown")
