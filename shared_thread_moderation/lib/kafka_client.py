"""
Kafka transport for the moderation worker.
Submissions come in on one topic; results, audit records and dead
letters go out on their own topics.
"""
import os
import json
import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Union

from kafka import KafkaConsumer, KafkaProducer
from kafka.errors import KafkaError
from pydantic import BaseModel, ValidationError

from shared_thread_moderation.models.result import AuditRecord, ModerationResult
from shared_thread_moderation.models.submission import ContentSubmission, utc_now

logger = logging.getLogger(__name__)

SUBMISSIONS_TOPIC = 'content-submissions'
RESULTS_TOPIC = 'moderation-results'
AUDIT_TOPIC = 'moderation-audit'
DLQ_TOPIC = 'moderation-dlq'

CONSUMER_GROUP = 'moderation-engine'

Payload = Union[BaseModel, Dict[str, Any]]


def serialize(payload: Payload) -> bytes:
    """JSON-encode a model or plain dict."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode='json')
    return json.dumps(payload, sort_keys=True).encode('utf-8')


class MessageBroker:
    """Publishes moderation output and feeds submissions to a handler."""

    def __init__(self, bootstrap_servers: Optional[str] = None, producer=None):
        self.bootstrap_servers = bootstrap_servers or os.getenv('KAFKA_BOOTSTRAP_SERVERS', 'localhost:9092')
        self.producer = producer or KafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            value_serializer=serialize,
            key_serializer=lambda k: k.encode('utf-8') if k else None,
            acks='all',
            retries=3,
        )
        self.consumer: Optional[KafkaConsumer] = None
        logger.info(f"Kafka producer ready: {self.bootstrap_servers}")

    def publish(self, topic: str, payload: Payload, key: Optional[str] = None) -> bool:
        """Send and wait for the broker ack. Returns False on delivery failure."""
        try:
            metadata = self.producer.send(topic, value=payload, key=key).get(timeout=10)
        except KafkaError as e:
            logger.error(f"Failed to deliver to {topic} (key={key}): {e}")
            return False
        logger.debug(f"Delivered to {topic}[{metadata.partition}] at offset {metadata.offset}")
        return True

    def publish_result(self, result: ModerationResult) -> bool:
        # Keyed by submission so redeliveries land on one partition
        return self.publish(RESULTS_TOPIC, result, key=result.submission_id)

    def publish_audit(self, record: AuditRecord) -> bool:
        # Keyed by author to keep each user's trail in order
        return self.publish(AUDIT_TOPIC, record, key=record.author_id)

    def publish_dlq(self, message: Any, error: str) -> bool:
        return self.publish(DLQ_TOPIC, {
            'original_message': message,
            'error': error,
            'failed_at': utc_now().isoformat(),
        })

    def dispatch_submission(self, message: Any, handler: Callable[[ContentSubmission], None]) -> bool:
        """
        Parse one raw message and hand it to the handler.
        Unparseable messages and handler failures are dead-lettered.
        """
        try:
            submission = ContentSubmission.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Rejected malformed submission message: {e.error_count()} errors")
            self.publish_dlq(message, str(e))
            return False

        try:
            handler(submission)
        except Exception as e:
            logger.exception(f"Failed to process submission {submission.id}")
            self.publish_dlq(message, repr(e))
            return False
        return True

    def consume_submissions(self, handler: Callable[[ContentSubmission], None]):
        """Block consuming the submissions topic."""
        self.consumer = KafkaConsumer(
            SUBMISSIONS_TOPIC,
            bootstrap_servers=self.bootstrap_servers,
            group_id=CONSUMER_GROUP,
            value_deserializer=lambda m: json.loads(m.decode('utf-8')),
            auto_offset_reset='earliest',
        )
        logger.info(f"Consuming {SUBMISSIONS_TOPIC} as {CONSUMER_GROUP}")

        for message in self.consumer:
            self.dispatch_submission(message.value, handler)

    def close(self):
        self.producer.flush()
        self.producer.close()
        if self.consumer is not None:
            self.consumer.close()
        logger.info("Kafka connections closed")


@lru_cache()
def get_broker() -> MessageBroker:
    """Shared broker, created on first use"""
    return MessageBroker()
