"""
User reputation data models.
Trust levels, strikes and the reputation record consumed by moderation.
"""

from datetime import datetime, timedelta
from typing import Optional, List, Dict
from pydantic import BaseModel, Field
from uuid import uuid4

from shared_thread_moderation.models.enums import (
    AchievementType, TrustLevel, StrikeType, StrikeSeverity, AppealResult
)
from shared_thread_moderation.models.submission import utc_now


class UserReputation(BaseModel):
    """
    Reputation snapshot used by the moderation pipeline.
    The system of record lives outside the scoring core.
    """
    user_id: str
    trust_level: TrustLevel = TrustLevel.NEW_USER
    reputation_score: float = 50.0
    strikes: int = Field(ge=0, default=0)
    last_violation: Optional[datetime] = None
    total_submissions: int = Field(ge=0, default=0)
    approved_submissions: int = Field(ge=0, default=0)
    community_reports: int = Field(ge=0, default=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def neutral(cls, user_id: str) -> "UserReputation":
        """Reputation assumed for new users and failed lookups."""
        return cls(user_id=user_id)


class Strike(BaseModel):
    """A strike issued against a user."""
    id: str = Field(default_factory=lambda: f"strike_{uuid4().hex[:12]}")
    type: StrikeType
    severity: StrikeSeverity
    description: str
    evidence: List[str] = Field(default_factory=list)
    issued_by: str
    issued_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    appealed: bool = False
    appeal_result: Optional[AppealResult] = None

    def is_active(self, at: datetime) -> bool:
        """Strikes count until they expire or are overturned on appeal."""
        return self.expires_at > at and self.appeal_result != AppealResult.OVERTURNED


class Achievement(BaseModel):
    """Recognition recorded on a reputation account."""
    id: str = Field(default_factory=lambda: f"achievement_{uuid4().hex[:12]}")
    type: AchievementType
    title: str
    description: str
    reputation_bonus: int = 0
    earned_at: datetime = Field(default_factory=utc_now)


class TrustRequirements(BaseModel):
    min_reputation: int
    min_approved_submissions: int
    max_strikes: int
    account_age_days: int
    community_endorsements: Optional[int] = None


class PublishingLimits(BaseModel):
    works_per_day: int
    comments_per_hour: int
    requires_approval: List[str] = Field(default_factory=list)


class TrustLevelConfig(BaseModel):
    """Requirements, privileges and limits attached to a trust level."""
    level: TrustLevel
    name: str
    description: str
    privileges: List[str]
    requirements: TrustRequirements
    publishing_limits: PublishingLimits


# Default trust level table
DEFAULT_TRUST_LEVELS: Dict[TrustLevel, TrustLevelConfig] = {
    TrustLevel.NEW_USER: TrustLevelConfig(
        level=TrustLevel.NEW_USER,
        name="New User",
        description="Recently joined Shared Thread, building initial reputation",
        privileges=["create_works", "comment_public", "basic_collections"],
        requirements=TrustRequirements(
            min_reputation=0, min_approved_submissions=0,
            max_strikes=0, account_age_days=0
        ),
        publishing_limits=PublishingLimits(
            works_per_day=1, comments_per_hour=5,
            requires_approval=["works", "media_uploads"]
        ),
    ),
    TrustLevel.VERIFIED_USER: TrustLevelConfig(
        level=TrustLevel.VERIFIED_USER,
        name="Verified User",
        description="Established user with consistent quality content",
        privileges=["auto_approve_text", "comment_beta", "create_collections", "report_content"],
        requirements=TrustRequirements(
            min_reputation=100, min_approved_submissions=10,
            max_strikes=1, account_age_days=7
        ),
        publishing_limits=PublishingLimits(
            works_per_day=5, comments_per_hour=15,
            requires_approval=["media_uploads"]
        ),
    ),
    TrustLevel.TRUSTED_CREATOR: TrustLevelConfig(
        level=TrustLevel.TRUSTED_CREATOR,
        name="Trusted Creator",
        description="Valued community member with proven content quality",
        privileges=["auto_approve_most", "priority_support", "beta_features", "mentor_new_users"],
        requirements=TrustRequirements(
            min_reputation=500, min_approved_submissions=50,
            max_strikes=2, account_age_days=30
        ),
        publishing_limits=PublishingLimits(
            works_per_day=10, comments_per_hour=30,
            requires_approval=["sensitive_content"]
        ),
    ),
    TrustLevel.COMMUNITY_MODERATOR: TrustLevelConfig(
        level=TrustLevel.COMMUNITY_MODERATOR,
        name="Community Moderator",
        description="Trusted with community moderation responsibilities",
        privileges=["flag_content", "moderate_comments", "access_reports", "community_insights"],
        requirements=TrustRequirements(
            min_reputation=1500, min_approved_submissions=150,
            max_strikes=1, account_age_days=90, community_endorsements=10
        ),
        publishing_limits=PublishingLimits(works_per_day=20, comments_per_hour=50),
    ),
    TrustLevel.STAFF_MODERATOR: TrustLevelConfig(
        level=TrustLevel.STAFF_MODERATOR,
        name="Staff Moderator",
        description="Shared Thread staff member with full moderation privileges",
        privileges=["full_moderation", "user_management", "policy_enforcement", "system_administration"],
        requirements=TrustRequirements(
            min_reputation=5000, min_approved_submissions=500,
            max_strikes=0, account_age_days=180
        ),
        publishing_limits=PublishingLimits(works_per_day=100, comments_per_hour=200),
    ),
}


class ReputationAccount(BaseModel):
    """
    Full reputation record kept by the reputation service.
    Projected to UserReputation for moderation.
    """
    user_id: str
    trust_level: TrustLevel = TrustLevel.NEW_USER
    reputation_score: float = Field(ge=0.0, default=50.0)
    strikes: List[Strike] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)

    # Moderation history
    total_submissions: int = 0
    approved_submissions: int = 0
    rejected_submissions: int = 0
    pending_submissions: int = 0
    appeals_filed: int = 0
    appeals_successful: int = 0
    last_violation: Optional[datetime] = None

    # Community standing
    community_reports: int = 0
    peer_endorsements: int = 0
    helpful_reports: int = 0
    false_reports: int = 0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def active_strikes(self, at: datetime) -> List[Strike]:
        return [s for s in self.strikes if s.is_active(at)]

    def account_age_days(self, at: datetime) -> int:
        age: timedelta = at - self.created_at
        return max(0, age.days)

    def to_reputation(self, at: datetime) -> UserReputation:
        return UserReputation(
            user_id=self.user_id,
            trust_level=self.trust_level,
            reputation_score=self.reputation_score,
            strikes=len(self.active_strikes(at)),
            last_violation=self.last_violation,
            total_submissions=self.total_submissions,
            approved_submissions=self.approved_submissions,
            community_reports=self.community_reports,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
