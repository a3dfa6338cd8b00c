"""
Decision Engine.
Maps the overall spam probability, adjusted for trust level, to a
moderation outcome with reason codes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from shared_thread_moderation.config import ModerationConfig
from shared_thread_moderation.models.enums import ModerationStatus, ReasonCode, TrustLevel
from shared_thread_moderation.models.result import ModerationResult
from shared_thread_moderation.models.signals import SpamSignals
from shared_thread_moderation.models.submission import utc_now


@dataclass(frozen=True)
class AdjustedThresholds:
    """Thresholds after the trust bonus is applied."""
    auto_approve: float
    auto_reject: float


class DecisionEngine:
    """
    Three-way decision: rejected, approved or pending_review.
    Rejection is checked first.
    """

    # Sub-score levels that name a rejection reason
    REJECT_KEYWORD_LEVEL = 0.5
    REJECT_REPETITION_LEVEL = 0.5
    REJECT_LINK_LEVEL = 0.5
    REJECT_VELOCITY_LEVEL = 0.7
    REJECT_VIOLATIONS_LEVEL = 0.5

    # Sub-score levels that name a review reason
    REVIEW_KEYWORD_LEVEL = 0.3
    REVIEW_VELOCITY_LEVEL = 0.4
    REVIEW_TRUST_LEVEL = 0.5   # below this normalized trust = new user

    def __init__(
        self,
        config: Optional[ModerationConfig] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.config = config or ModerationConfig()
        self.clock = clock

    def adjust_thresholds(self, trust_level: TrustLevel) -> AdjustedThresholds:
        """
        Trust bonus raises the reject threshold and lowers the approve
        threshold by trust_level * trust_bonus_per_level.
        """
        bonus = int(trust_level) * self.config.trust_bonus_per_level
        thresholds = self.config.thresholds
        return AdjustedThresholds(
            auto_approve=thresholds.auto_approve - bonus,
            auto_reject=thresholds.auto_reject + bonus,
        )

    def decide(
        self,
        submission_id: str,
        signals: SpamSignals,
        trust_level: TrustLevel
    ) -> ModerationResult:
        """Make the moderation decision for one submission."""
        spam_score = signals.overall_spam_probability
        thresholds = self.adjust_thresholds(trust_level)

        if spam_score >= thresholds.auto_reject:
            return ModerationResult(
                submission_id=submission_id,
                status=ModerationStatus.REJECTED,
                confidence=spam_score,
                reasons=self.rejection_reasons(signals),
                appeal_deadline=self.appeal_deadline(),
            )

        if spam_score <= thresholds.auto_approve:
            return ModerationResult(
                submission_id=submission_id,
                status=ModerationStatus.APPROVED,
                confidence=1 - spam_score,
                reasons=[ReasonCode.AUTOMATED_APPROVAL.value],
            )

        return ModerationResult(
            submission_id=submission_id,
            status=ModerationStatus.PENDING_REVIEW,
            confidence=abs(0.5 - spam_score),
            reasons=self.review_reasons(signals),
            appeal_deadline=self.appeal_deadline(),
        )

    def system_error(self, submission_id: str) -> ModerationResult:
        """Result used when analysis fails. Always routed to a human."""
        return ModerationResult(
            submission_id=submission_id,
            status=ModerationStatus.PENDING_REVIEW,
            confidence=0.0,
            reasons=[ReasonCode.SYSTEM_ERROR.value],
            appeal_deadline=self.appeal_deadline(),
        )

    def rejection_reasons(self, signals: SpamSignals) -> List[str]:
        content = signals.content_analysis
        behavior = signals.behavioral_analysis
        factors = signals.reputation_factors
        reasons: List[ReasonCode] = []

        if content.keyword_spam_score > self.REJECT_KEYWORD_LEVEL:
            reasons.append(ReasonCode.SPAM_KEYWORDS_DETECTED)
        if content.repetition_score > self.REJECT_REPETITION_LEVEL:
            reasons.append(ReasonCode.EXCESSIVE_REPETITION)
        if content.link_spam_score > self.REJECT_LINK_LEVEL:
            reasons.append(ReasonCode.SUSPICIOUS_LINKS)
        if behavior.velocity_score > self.REJECT_VELOCITY_LEVEL:
            reasons.append(ReasonCode.POSTING_TOO_FREQUENTLY)
        if factors.historical_violations > self.REJECT_VIOLATIONS_LEVEL:
            reasons.append(ReasonCode.PREVIOUS_POLICY_VIOLATIONS)

        if not reasons:
            reasons.append(ReasonCode.AUTOMATED_SPAM_DETECTION)
        return [r.value for r in reasons]

    def review_reasons(self, signals: SpamSignals) -> List[str]:
        reasons: List[ReasonCode] = []

        if signals.content_analysis.keyword_spam_score > self.REVIEW_KEYWORD_LEVEL:
            reasons.append(ReasonCode.POTENTIAL_SPAM_KEYWORDS)
        if signals.behavioral_analysis.velocity_score > self.REVIEW_VELOCITY_LEVEL:
            reasons.append(ReasonCode.ELEVATED_POSTING_FREQUENCY)
        if signals.reputation_factors.user_trust_level < self.REVIEW_TRUST_LEVEL:
            reasons.append(ReasonCode.NEW_USER_REVIEW)

        if not reasons:
            reasons.append(ReasonCode.ROUTINE_QUALITY_CHECK)
        return [r.value for r in reasons]

    def appeal_deadline(self) -> datetime:
        return self.clock() + timedelta(days=self.config.appeal_window_days)
