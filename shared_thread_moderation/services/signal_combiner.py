"""
Signal Combiner.
Normalizes reputation inputs and merges content, behavior and reputation
signals into a single spam probability with fixed weights.
"""

from shared_thread_moderation.models.reputation import UserReputation
from shared_thread_moderation.models.signals import (
    BehavioralAnalysis, ContentAnalysis, ReputationFactors, SpamSignals, clamp
)


def extract_reputation_factors(reputation: UserReputation) -> ReputationFactors:
    """Normalize a reputation record to [0, 1] factors."""
    trust_level = int(reputation.trust_level) / 4
    violation_penalty = min(reputation.strikes * 0.2, 1.0)

    if reputation.total_submissions > 0:
        approval_rate = reputation.approved_submissions / reputation.total_submissions
    else:
        approval_rate = 0.5  # Neutral prior for new users

    return ReputationFactors(
        user_trust_level=clamp(trust_level),
        historical_violations=clamp(violation_penalty),
        community_standing=clamp(approval_rate),
    )


class SignalCombiner:
    """
    Deterministic weighted sum over all signal groups.
    Weights sum to 1.0 within each group and at the top level; existing
    threshold tuning depends on these exact values.
    """

    CONTENT_WEIGHTS = {
        'keyword_spam_score': 0.3,
        'repetition_score': 0.3,
        'link_spam_score': 0.2,
        'sentiment_score': 0.2,
    }

    BEHAVIOR_WEIGHTS = {
        'velocity_score': 0.4,
        'pattern_score': 0.4,
        'timing_score': 0.2,
    }

    REPUTATION_WEIGHTS = {
        'untrusted': 0.4,
        'violations': 0.4,
        'poor_standing': 0.2,
    }

    GROUP_WEIGHTS = {
        'content': 0.4,
        'behavior': 0.3,
        'reputation': 0.3,
    }

    def content_score(self, content: ContentAnalysis) -> float:
        w = self.CONTENT_WEIGHTS
        return (
            content.keyword_spam_score * w['keyword_spam_score'] +
            content.repetition_score * w['repetition_score'] +
            content.link_spam_score * w['link_spam_score'] +
            content.sentiment_score * w['sentiment_score']
        )

    def behavior_score(self, behavior: BehavioralAnalysis) -> float:
        w = self.BEHAVIOR_WEIGHTS
        return (
            behavior.velocity_score * w['velocity_score'] +
            behavior.pattern_score * w['pattern_score'] +
            behavior.timing_score * w['timing_score']
        )

    def reputation_score(self, factors: ReputationFactors) -> float:
        w = self.REPUTATION_WEIGHTS
        return (
            (1 - factors.user_trust_level) * w['untrusted'] +
            factors.historical_violations * w['violations'] +
            (1 - factors.community_standing) * w['poor_standing']
        )

    def combine(
        self,
        content: ContentAnalysis,
        behavior: BehavioralAnalysis,
        factors: ReputationFactors
    ) -> float:
        """Overall spam probability in [0, 1]."""
        w = self.GROUP_WEIGHTS
        overall = (
            self.content_score(content) * w['content'] +
            self.behavior_score(behavior) * w['behavior'] +
            self.reputation_score(factors) * w['reputation']
        )
        return clamp(overall)

    def build_signals(
        self,
        content: ContentAnalysis,
        behavior: BehavioralAnalysis,
        factors: ReputationFactors
    ) -> SpamSignals:
        return SpamSignals(
            content_analysis=content,
            behavioral_analysis=behavior,
            reputation_factors=factors,
            overall_spam_probability=self.combine(content, behavior, factors),
        )
