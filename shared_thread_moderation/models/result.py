"""
Moderation result and audit record models.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, model_validator

from shared_thread_moderation.models.enums import ModerationStatus
from shared_thread_moderation.models.signals import SpamSignals
from shared_thread_moderation.models.submission import utc_now


class ModerationResult(BaseModel):
    """
    Terminal artifact of the moderation pipeline.
    Consumed by publish/queue logic and staff review tooling.
    """
    submission_id: str
    status: ModerationStatus
    confidence: float = Field(ge=0.0, le=1.0)
    reasons: List[str] = Field(default_factory=list)

    # Set by staff tooling after human review
    reviewer_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    appeal_deadline: Optional[datetime] = None

    @model_validator(mode="after")
    def _require_reasons(self) -> "ModerationResult":
        if self.status in (ModerationStatus.REJECTED, ModerationStatus.PENDING_REVIEW) and not self.reasons:
            raise ValueError(f"{self.status.value} results must carry at least one reason")
        return self

    def is_appealable(self, at: Optional[datetime] = None) -> bool:
        """Check whether an appeal is still accepted."""
        if self.appeal_deadline is None:
            return False
        return (at or utc_now()) <= self.appeal_deadline


class AuditRecord(BaseModel):
    """
    Audit trail entry written for every moderation decision.
    """
    submission_id: str
    author_id: str
    decision: ModerationStatus
    confidence: float
    reasons: List[str]
    spam_signals: Optional[SpamSignals] = None  # Absent on system_error
    timestamp: datetime = Field(default_factory=utc_now)
    system_version: str = "1.0"
