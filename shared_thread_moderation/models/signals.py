"""
Spam signal models.
Ephemeral per-submission scores. All scores lie in [0, 1].
"""

from pydantic import BaseModel, Field


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class ContentAnalysis(BaseModel):
    """Signals extracted from the submitted text and links."""
    keyword_spam_score: float = Field(ge=0.0, le=1.0, default=0.0)
    repetition_score: float = Field(ge=0.0, le=1.0, default=0.0)
    link_spam_score: float = Field(ge=0.0, le=1.0, default=0.0)
    sentiment_score: float = Field(ge=0.0, le=1.0, default=0.0)


class BehavioralAnalysis(BaseModel):
    """Signals extracted from the author's submission cadence."""
    velocity_score: float = Field(ge=0.0, le=1.0, default=0.0)
    pattern_score: float = Field(ge=0.0, le=1.0, default=0.0)
    timing_score: float = Field(ge=0.0, le=1.0, default=0.0)


class ReputationFactors(BaseModel):
    """Normalized reputation inputs."""
    user_trust_level: float = Field(ge=0.0, le=1.0, default=0.0)
    historical_violations: float = Field(ge=0.0, le=1.0, default=0.0)
    community_standing: float = Field(ge=0.0, le=1.0, default=0.5)


class SpamSignals(BaseModel):
    """Full signal breakdown for one submission."""
    content_analysis: ContentAnalysis
    behavioral_analysis: BehavioralAnalysis
    reputation_factors: ReputationFactors
    overall_spam_probability: float = Field(ge=0.0, le=1.0)
