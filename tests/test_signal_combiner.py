"""Tests for reputation factor extraction and signal combination."""

import pytest

from shared_thread_moderation.models.enums import TrustLevel
from shared_thread_moderation.models.reputation import UserReputation
from shared_thread_moderation.models.signals import (
    BehavioralAnalysis,
    ContentAnalysis,
    ReputationFactors,
)
from shared_thread_moderation.services.signal_combiner import (
    SignalCombiner,
    extract_reputation_factors,
)


def test_reputation_factors_for_new_user():
    factors = extract_reputation_factors(UserReputation.neutral("new"))
    assert factors.user_trust_level == 0.0
    assert factors.historical_violations == 0.0
    assert factors.community_standing == 0.5


def test_reputation_factors_normalize_and_cap():
    reputation = UserReputation(
        user_id="u",
        trust_level=TrustLevel.TRUSTED_CREATOR,
        strikes=7,
        total_submissions=8,
        approved_submissions=6,
    )
    factors = extract_reputation_factors(reputation)
    assert factors.user_trust_level == pytest.approx(0.5)
    assert factors.historical_violations == 1.0
    assert factors.community_standing == pytest.approx(0.75)


def test_weights_sum_to_one():
    combiner = SignalCombiner()
    for weights in (
        combiner.CONTENT_WEIGHTS,
        combiner.BEHAVIOR_WEIGHTS,
        combiner.REPUTATION_WEIGHTS,
        combiner.GROUP_WEIGHTS,
    ):
        assert sum(weights.values()) == pytest.approx(1.0)


def test_combine_weighted_sum():
    combiner = SignalCombiner()
    content = ContentAnalysis(
        keyword_spam_score=0.5,
        repetition_score=0.2,
        link_spam_score=1.0,
        sentiment_score=0.1,
    )
    behavior = BehavioralAnalysis(velocity_score=0.1, pattern_score=0.1, timing_score=0.1)
    factors = ReputationFactors(user_trust_level=0.25, historical_violations=0.2, community_standing=0.5)

    content_score = 0.3 * 0.5 + 0.3 * 0.2 + 0.2 * 1.0 + 0.2 * 0.1
    behavior_score = 0.1
    reputation_score = 0.4 * 0.75 + 0.4 * 0.2 + 0.2 * 0.5
    expected = 0.4 * content_score + 0.3 * behavior_score + 0.3 * reputation_score

    assert combiner.combine(content, behavior, factors) == pytest.approx(expected)


def test_combine_extremes_stay_in_range():
    combiner = SignalCombiner()
    worst = combiner.combine(
        ContentAnalysis(keyword_spam_score=1, repetition_score=1, link_spam_score=1, sentiment_score=1),
        BehavioralAnalysis(velocity_score=1, pattern_score=1, timing_score=1),
        ReputationFactors(user_trust_level=0, historical_violations=1, community_standing=0),
    )
    best = combiner.combine(
        ContentAnalysis(),
        BehavioralAnalysis(),
        ReputationFactors(user_trust_level=1, historical_violations=0, community_standing=1),
    )
    assert worst == pytest.approx(1.0)
    assert best == 0.0


def test_build_signals_carries_breakdown():
    combiner = SignalCombiner()
    content = ContentAnalysis(keyword_spam_score=0.4)
    behavior = BehavioralAnalysis()
    factors = ReputationFactors()

    signals = combiner.build_signals(content, behavior, factors)

    assert signals.content_analysis == content
    assert signals.overall_spam_probability == pytest.approx(combiner.combine(content, behavior, factors))
