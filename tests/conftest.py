"""Shared fixtures for the moderation test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from shared_thread_moderation.config import ModerationConfig
from shared_thread_moderation.models.enums import SubmissionType, TrustLevel
from shared_thread_moderation.models.reputation import UserReputation
from shared_thread_moderation.models.submission import ContentSubmission, SubmissionMetadata
from shared_thread_moderation.services.audit_service import InMemoryAuditSink
from shared_thread_moderation.services.moderation_service import ModerationEngine
from shared_thread_moderation.services.reputation_service import ReputationProvider, ReputationService

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

CLEAN_TEXT = "A quiet story about the sea and the lighthouse keeper who loved it."


class MutableClock:
    """Clock whose current time tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class StaticReputationProvider(ReputationProvider):
    """Returns a fixed reputation for every user."""

    def __init__(self, reputation: UserReputation) -> None:
        self.reputation = reputation
        self.calls: list[str] = []

    async def get_user_reputation(self, user_id: str) -> UserReputation:
        self.calls.append(user_id)
        return self.reputation.model_copy(update={"user_id": user_id})


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink()


@pytest.fixture
def make_submission() -> Callable[..., ContentSubmission]:
    def _make(
        content: str = CLEAN_TEXT,
        *,
        submission_id: str = "sub-1",
        author_id: str = "author-1",
        submission_type: SubmissionType = SubmissionType.WORK,
        media_urls: list[str] | None = None,
        created_at: datetime = NOW,
    ) -> ContentSubmission:
        return ContentSubmission(
            id=submission_id,
            type=submission_type,
            content=content,
            metadata=SubmissionMetadata(media_urls=media_urls or []),
            author_id=author_id,
            created_at=created_at,
        )

    return _make


@pytest.fixture
def trusted_reputation() -> UserReputation:
    return UserReputation(
        user_id="author-1",
        trust_level=TrustLevel.STAFF_MODERATOR,
        reputation_score=6000,
        strikes=0,
        total_submissions=40,
        approved_submissions=40,
    )


@pytest.fixture
def make_engine(clock, audit_sink) -> Callable[..., ModerationEngine]:
    def _make(**overrides) -> ModerationEngine:
        overrides.setdefault("config", ModerationConfig())
        overrides.setdefault("reputation_provider", ReputationService(clock=clock))
        overrides.setdefault("audit_sink", audit_sink)
        overrides.setdefault("clock", clock)
        return ModerationEngine(**overrides)

    return _make
