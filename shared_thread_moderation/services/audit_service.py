"""
Audit logging for moderation decisions.
Every decision is written to an append-only sink, whatever its outcome.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from shared_thread_moderation.models.enums import ModerationStatus
from shared_thread_moderation.models.result import AuditRecord

logger = logging.getLogger(__name__)


class AuditSink(ABC):
    """Append-only destination for audit records."""

    @abstractmethod
    async def write(self, record: AuditRecord) -> None:
        """Persist one audit record."""


class LoggingAuditSink(AuditSink):
    """Development sink: one JSON line per decision on the audit logger."""

    def __init__(self, audit_logger: Optional[logging.Logger] = None):
        self.audit_logger = audit_logger or logging.getLogger("shared_thread_moderation.audit")

    async def write(self, record: AuditRecord) -> None:
        self.audit_logger.info(
            "Moderation decision: %s",
            json.dumps(record.model_dump(mode="json"), sort_keys=True)
        )


class InMemoryAuditSink(AuditSink):
    """Keeps records in process. Used by tests and local tooling."""

    def __init__(self):
        self.records: List[AuditRecord] = []

    async def write(self, record: AuditRecord) -> None:
        self.records.append(record)

    def by_status(self, status: ModerationStatus) -> List[AuditRecord]:
        return [r for r in self.records if r.decision == status]

    def for_submission(self, submission_id: str) -> List[AuditRecord]:
        return [r for r in self.records if r.submission_id == submission_id]


class PostgresAuditSink(AuditSink):
    """Writes to the moderation_audit_log table."""

    def __init__(self, database=None):
        if database is None:
            from shared_thread_moderation.lib.database import get_db
            database = get_db()
        self.database = database

    async def write(self, record: AuditRecord) -> None:
        # psycopg2 is blocking; keep it off the event loop
        await asyncio.to_thread(self.database.insert_audit_record, record.model_dump(mode="json"))


class KafkaAuditSink(AuditSink):
    """Publishes to the moderation-audit topic."""

    def __init__(self, broker=None):
        if broker is None:
            from shared_thread_moderation.lib.kafka_client import get_broker
            broker = get_broker()
        self.broker = broker

    async def write(self, record: AuditRecord) -> None:
        sent = await asyncio.to_thread(self.broker.publish_audit, record)
        if not sent:
            raise RuntimeError(f"Audit record for {record.submission_id} was not delivered")


class CompositeAuditSink(AuditSink):
    """
    Fans a record out to several sinks.
    Every sink is attempted; the first failure is re-raised afterwards.
    """

    def __init__(self, sinks: Sequence[AuditSink]):
        self.sinks = list(sinks)

    async def write(self, record: AuditRecord) -> None:
        results = await asyncio.gather(
            *(sink.write(record) for sink in self.sinks),
            return_exceptions=True
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            logger.error(f"Audit sink failed for {record.submission_id}: {error}")
        if errors:
            raise errors[0]
