"""Pydantic models for the moderation pipeline."""

from shared_thread_moderation.models.enums import (
    SubmissionType,
    ModerationStatus,
    TrustLevel,
    ReasonCode,
    StrikeType,
    StrikeSeverity,
    AppealResult,
    ReputationAction,
    SpamCheckCategory,
    AchievementType,
)
from shared_thread_moderation.models.submission import ContentSubmission, SubmissionMetadata
from shared_thread_moderation.models.reputation import (
    UserReputation,
    Strike,
    Achievement,
    TrustLevelConfig,
    ReputationAccount,
    DEFAULT_TRUST_LEVELS,
)
from shared_thread_moderation.models.signals import (
    ContentAnalysis,
    BehavioralAnalysis,
    ReputationFactors,
    SpamSignals,
)
from shared_thread_moderation.models.result import ModerationResult, AuditRecord

__all__ = [
    "SubmissionType",
    "ModerationStatus",
    "TrustLevel",
    "ReasonCode",
    "StrikeType",
    "StrikeSeverity",
    "AppealResult",
    "ReputationAction",
    "SpamCheckCategory",
    "AchievementType",
    "ContentSubmission",
    "SubmissionMetadata",
    "UserReputation",
    "Strike",
    "Achievement",
    "TrustLevelConfig",
    "ReputationAccount",
    "DEFAULT_TRUST_LEVELS",
    "ContentAnalysis",
    "BehavioralAnalysis",
    "ReputationFactors",
    "SpamSignals",
    "ModerationResult",
    "AuditRecord",
]
