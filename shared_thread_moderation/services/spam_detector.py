"""
Unified spam checks.
Runs every kind of user content through the moderation engine and
reports block/flag flags for the calling feature.
"""

from dataclasses import dataclass
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from shared_thread_moderation.models.enums import (
    ModerationStatus, SpamCheckCategory, SubmissionType
)
from shared_thread_moderation.models.submission import ContentSubmission, SubmissionMetadata
from shared_thread_moderation.services.moderation_service import ModerationEngine


# Categories without a submission type of their own are moderated as comments
CATEGORY_SUBMISSION_TYPES = {
    SpamCheckCategory.WORK: SubmissionType.WORK,
    SpamCheckCategory.COLLECTION: SubmissionType.COLLECTION,
    SpamCheckCategory.PROFILE: SubmissionType.PROFILE,
}


class ContentToCheck(BaseModel):
    """Content handed to the unified spam check."""
    type: SpamCheckCategory
    content: str
    title: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)
    language: str = "en"
    author_id: str


@dataclass
class SpamCheckResult:
    """Spam verdict for a calling feature."""
    is_spam: bool
    confidence: float
    reasons: List[str]
    should_block: bool   # Auto-block without review
    should_flag: bool    # Flag for human review
    category: SpamCheckCategory


class SpamDetector:
    """Spam checks for works, comments, profiles, collections and discussions."""

    def __init__(self, engine: ModerationEngine):
        self.engine = engine

    async def check(self, item: ContentToCheck) -> SpamCheckResult:
        submission = ContentSubmission(
            id=f"spam-check-{uuid4()}",
            type=CATEGORY_SUBMISSION_TYPES.get(item.type, SubmissionType.COMMENT),
            content=item.content,
            metadata=SubmissionMetadata(
                title=item.title,
                tags=item.tags,
                media_urls=item.links,
                language=item.language,
            ),
            author_id=item.author_id,
        )
        result = await self.engine.moderate(submission)

        rejected = result.status == ModerationStatus.REJECTED
        return SpamCheckResult(
            is_spam=rejected,
            confidence=result.confidence,
            reasons=list(result.reasons),
            should_block=rejected,
            should_flag=result.status in (ModerationStatus.PENDING_REVIEW, ModerationStatus.FLAGGED),
            category=item.type,
        )

    async def check_work(self, title: str, content: str, tags: List[str], author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.WORK,
            content=f"{title}\n\n{content}",
            title=title,
            tags=tags,
            author_id=author_id,
        ))

    async def check_comment(self, content: str, author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.COMMENT,
            content=content,
            author_id=author_id,
        ))

    async def check_profile(self, display_name: str, bio: str, author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.PROFILE,
            content=f"{display_name}\n{bio}",
            author_id=author_id,
        ))

    async def check_collection(self, name: str, description: str, author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.COLLECTION,
            content=f"{name}\n{description}",
            title=name,
            author_id=author_id,
        ))

    async def check_discussion(self, title: str, content: str, author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.DISCUSSION,
            content=f"{title}\n\n{content}",
            title=title,
            author_id=author_id,
        ))

    async def check_proposal(self, name: str, description: str, purpose: str, author_id: str) -> SpamCheckResult:
        return await self.check(ContentToCheck(
            type=SpamCheckCategory.PROPOSAL,
            content=f"{name}\n{description}\n{purpose}",
            title=name,
            author_id=author_id,
        ))
