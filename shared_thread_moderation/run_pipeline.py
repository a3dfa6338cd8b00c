"""
Stream worker - consumes content submissions, moderates them and
publishes the results.
"""
import os
import logging
import time
import asyncio
from typing import List

from shared_thread_moderation.config import load_config
from shared_thread_moderation.lib.kafka_client import get_broker
from shared_thread_moderation.lib.metrics import metrics
from shared_thread_moderation.models.submission import ContentSubmission
from shared_thread_moderation.services.audit_service import (
    AuditSink, CompositeAuditSink, KafkaAuditSink, LoggingAuditSink, PostgresAuditSink
)
from shared_thread_moderation.services.behavior_analyzer import (
    BehaviorSignalSource, HistoryBehaviorSignalSource, InMemorySubmissionHistory,
    StaticBehaviorSignalSource
)
from shared_thread_moderation.services.moderation_service import ModerationEngine
from shared_thread_moderation.services.reputation_service import (
    PostgresReputationProvider, ReputationProvider, ReputationService
)

logger = logging.getLogger(__name__)

def _sink_names(names: str) -> List[str]:
    return [n.strip().lower() for n in names.split(',') if n.strip()]


def build_audit_sink(names: str, database=None, broker=None) -> AuditSink:
    """Audit sinks from a comma separated list: log, postgres, kafka"""
    sinks: List[AuditSink] = []
    for name in _sink_names(names):
        if name == 'log':
            sinks.append(LoggingAuditSink())
        elif name == 'postgres':
            sinks.append(PostgresAuditSink(database))
        elif name == 'kafka':
            sinks.append(KafkaAuditSink(broker))
        else:
            raise ValueError(f"Unknown audit sink: {name}")
    if not sinks:
        return LoggingAuditSink()
    return sinks[0] if len(sinks) == 1 else CompositeAuditSink(sinks)


class Pipeline:
    """End-to-end moderation worker"""

    def __init__(self, broker=None, database=None):
        self.config = load_config()
        self.broker = broker or get_broker()
        self.history = InMemorySubmissionHistory()

        audit_sinks = os.getenv('AUDIT_SINKS', 'log')
        reputation_source = os.getenv('REPUTATION_SOURCE', 'memory').lower()
        if reputation_source not in ('memory', 'postgres'):
            raise ValueError(f"Unknown reputation source: {reputation_source}")

        self.database = None
        if reputation_source == 'postgres' or 'postgres' in _sink_names(audit_sinks):
            if database is None:
                from shared_thread_moderation.lib.database import get_db
                database = get_db()
            self.database = database
            self.database.ensure_schema()

        # Postgres keeps the accounts; memory holds only the recently active ones
        reputation_provider: ReputationProvider
        if reputation_source == 'postgres':
            self.reputation_service = ReputationService(
                store=self.database,
                max_cached_accounts=int(os.getenv('REPUTATION_CACHE_SIZE', '10000')),
            )
            reputation_provider = PostgresReputationProvider(self.database)
        else:
            self.reputation_service = ReputationService()
            reputation_provider = self.reputation_service

        behavior_source: BehaviorSignalSource
        if os.getenv('BEHAVIOR_SOURCE', 'static') == 'history':
            behavior_source = HistoryBehaviorSignalSource(self.history)
        else:
            behavior_source = StaticBehaviorSignalSource()

        self.engine = ModerationEngine(
            config=self.config,
            reputation_provider=reputation_provider,
            behavior_source=behavior_source,
            audit_sink=build_audit_sink(audit_sinks, self.database, self.broker),
        )
        logger.info(f"Pipeline initialized (reputation={reputation_source}, audit={audit_sinks})")

    def handle_submission(self, submission: ContentSubmission):
        """
        1. Run the moderation engine
        2. Record the outcome against the author
        3. Publish the result
        Errors propagate to the broker, which dead-letters the message.
        """
        start_time = time.time()

        result = asyncio.run(self.engine.moderate(submission))

        self.reputation_service.record_outcome(submission, result)
        self.history.record(submission)
        if not self.broker.publish_result(result):
            raise RuntimeError(f"Result for {submission.id} was not delivered")

        processing_time = int((time.time() - start_time) * 1000)
        logger.info(f"Submission {submission.id} processed: {result.status.value} in {processing_time}ms")

    def start(self):
        """Consume submissions until interrupted"""
        metrics.start()
        logger.info("Starting submission consumer...")
        try:
            self.broker.consume_submissions(self.handle_submission)
        except KeyboardInterrupt:
            logger.info("Shutting down pipeline...")
        finally:
            self.broker.close()
            if self.database is not None:
                self.database.close()


def main():
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    Pipeline().start()


if __name__ == '__main__':
    main()
