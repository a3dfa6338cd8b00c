"""
Content submission data models.
Immutable input to the moderation pipeline.
"""

from datetime import datetime, timezone
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import uuid4

from shared_thread_moderation.models.enums import SubmissionType


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionMetadata(BaseModel):
    """Optional metadata supplied with a submission."""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    media_urls: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    language: Optional[str] = None


class ContentSubmission(BaseModel):
    """
    A piece of user content submitted for moderation.
    Created by the application's content-creation flow.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: SubmissionType
    content: str
    metadata: SubmissionMetadata = Field(default_factory=SubmissionMetadata)
    author_id: str
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('created_at')
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Producers may omit the offset; timestamps without one are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
