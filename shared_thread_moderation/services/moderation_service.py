"""
Core Moderation Engine.
Looks up reputation, extracts signals, combines scores, decides and
writes the audit trail. Uncertain cases always route to a human.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from shared_thread_moderation.config import ModerationConfig
from shared_thread_moderation.lib.metrics import MetricsExporter, metrics
from shared_thread_moderation.models.reputation import UserReputation
from shared_thread_moderation.models.result import AuditRecord, ModerationResult
from shared_thread_moderation.models.signals import SpamSignals
from shared_thread_moderation.models.submission import ContentSubmission, utc_now
from shared_thread_moderation.services.audit_service import AuditSink, LoggingAuditSink
from shared_thread_moderation.services.behavior_analyzer import (
    BehaviorSignalSource, StaticBehaviorSignalSource
)
from shared_thread_moderation.services.content_analyzer import ContentAnalyzer
from shared_thread_moderation.services.decision_engine import DecisionEngine
from shared_thread_moderation.services.reputation_service import (
    ReputationProvider, ReputationService
)
from shared_thread_moderation.services.signal_combiner import (
    SignalCombiner, extract_reputation_factors
)

logger = logging.getLogger(__name__)


class ModerationEngine:
    """
    Stateless moderation service.
    Configuration and collaborators are injected, so differently tuned
    engines can run side by side.
    """

    def __init__(
        self,
        config: Optional[ModerationConfig] = None,
        reputation_provider: Optional[ReputationProvider] = None,
        behavior_source: Optional[BehaviorSignalSource] = None,
        audit_sink: Optional[AuditSink] = None,
        content_analyzer: Optional[ContentAnalyzer] = None,
        combiner: Optional[SignalCombiner] = None,
        decision_engine: Optional[DecisionEngine] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config or ModerationConfig()
        self.clock = clock
        self.reputation_provider = reputation_provider or ReputationService(clock=clock)
        self.behavior_source = behavior_source or StaticBehaviorSignalSource()
        self.audit_sink = audit_sink or LoggingAuditSink()
        self.content_analyzer = content_analyzer or ContentAnalyzer(self.config)
        self.combiner = combiner or SignalCombiner()
        self.decision_engine = decision_engine or DecisionEngine(self.config, clock=clock)

    @MetricsExporter.track_processing("moderate")
    async def moderate(self, submission: ContentSubmission) -> ModerationResult:
        """
        Main entry point for content moderation.
        Never raises for analysis failures; they become pending_review.
        """
        reputation = await self.lookup_reputation(submission.author_id)

        signals: Optional[SpamSignals] = None
        try:
            signals = await self.analyze(submission, reputation)
            result = self.decision_engine.decide(submission.id, signals, reputation.trust_level)
        except Exception:
            logger.exception(f"Moderation analysis failed for submission {submission.id}")
            metrics.record_system_error()
            signals = None
            result = self.decision_engine.system_error(submission.id)

        await self.write_audit(submission, result, signals)

        metrics.record_decision(result.status.value, submission.type.value, result.reasons)
        if signals is not None:
            metrics.record_spam_probability(signals.overall_spam_probability)

        logger.debug(
            f"Submission {submission.id} by {submission.author_id}: "
            f"{result.status.value} (confidence={result.confidence:.2f})"
        )
        return result

    async def moderate_many(self, submissions: Iterable[ContentSubmission]) -> List[ModerationResult]:
        """Moderate independent submissions concurrently."""
        return list(await asyncio.gather(*(self.moderate(s) for s in submissions)))

    async def analyze(self, submission: ContentSubmission, reputation: UserReputation) -> SpamSignals:
        """Compute the full signal breakdown for a submission."""
        content = self.content_analyzer.analyze(submission)
        behavior = await self.behavior_source.analyze(submission.author_id)
        factors = extract_reputation_factors(reputation)
        return self.combiner.build_signals(content, behavior, factors)

    async def lookup_reputation(self, user_id: str) -> UserReputation:
        """Reputation lookup; errors and timeouts fall back to the neutral record."""
        try:
            return await asyncio.wait_for(
                self.reputation_provider.get_user_reputation(user_id),
                timeout=self.config.reputation_timeout_seconds
            )
        except Exception as e:
            logger.warning(f"Reputation lookup failed for {user_id}, using neutral reputation: {e!r}")
            metrics.record_reputation_fallback()
            return UserReputation.neutral(user_id)

    async def write_audit(
        self,
        submission: ContentSubmission,
        result: ModerationResult,
        signals: Optional[SpamSignals]
    ) -> None:
        """Best-effort audit write; failures are logged and dropped."""
        record = AuditRecord(
            submission_id=submission.id,
            author_id=submission.author_id,
            decision=result.status,
            confidence=result.confidence,
            reasons=list(result.reasons),
            spam_signals=signals,
            timestamp=self.clock(),
            system_version=self.config.system_version,
        )
        try:
            await asyncio.wait_for(
                self.audit_sink.write(record),
                timeout=self.config.audit_timeout_seconds
            )
        except Exception as e:
            logger.error(f"Failed to write audit record for {submission.id}: {e!r}")
            metrics.record_audit_failure()
