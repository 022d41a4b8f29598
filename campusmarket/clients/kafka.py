import json
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from aiokafka import AIOKafkaProducer


@dataclass
class KafkaReviewProducer:
    bootstrap_servers: str
    review_topic: str = 'listing_review'
    _producer: AIOKafkaProducer | None = None

    @classmethod
    def from_env(cls) -> 'KafkaReviewProducer | None':
        bootstrap_servers = os.getenv('KAFKA_BOOTSTRAP_SERVERS')
        if not bootstrap_servers:
            return None

        return cls(
            bootstrap_servers=bootstrap_servers,
            review_topic=os.getenv('KAFKA_REVIEW_TOPIC', 'listing_review'),
        )

    async def start(self) -> None:
        if self._producer is not None:
            return

        self._producer = AIOKafkaProducer(bootstrap_servers=self.bootstrap_servers)
        await self._producer.start()

    async def stop(self) -> None:
        if self._producer is None:
            return

        await self._producer.stop()
        self._producer = None

    async def send_review_flag(self, listing: dict[str, Any], reason: str) -> None:
        message = {
            'listing': listing,
            'reason': reason,
            'timestamp': datetime.now(UTC).isoformat(),
        }
        await self._send(self.review_topic, message)

    async def _send(self, topic: str, payload: dict[str, Any]) -> None:
        if self._producer is None:
            raise RuntimeError('Kafka producer is not started')

        await self._producer.send_and_wait(
            topic,
            json.dumps(payload, default=str).encode('utf-8'),
        )
