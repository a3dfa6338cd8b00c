"""
Behavior Analyzer - submission cadence signals.
Velocity, automation pattern and timing regularity per author.

Two signal sources are provided:
- StaticBehaviorSignalSource returns fixed neutral-low scores. It is the
  default and keeps the production threshold tuning valid.
- HistoryBehaviorSignalSource scores the author's recent submissions
  fetched from a SubmissionHistory collaborator.
"""

import hashlib
import statistics
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from shared_thread_moderation.models.signals import BehavioralAnalysis, clamp
from shared_thread_moderation.models.submission import ContentSubmission, utc_now


class SubmissionHistory(ABC):
    """Collaborator giving access to an author's past submissions."""

    @abstractmethod
    async def get_recent_submissions(
        self,
        user_id: str,
        window: timedelta,
        now: Optional[datetime] = None
    ) -> List[ContentSubmission]:
        """Submissions by user_id created within `window` before `now`."""


class InMemorySubmissionHistory(SubmissionHistory):
    """
    Process-local submission history.
    Entries older than max_age are dropped, so windows longer than
    max_age see a truncated history.
    """

    def __init__(
        self,
        max_age: timedelta = timedelta(hours=24),
        sweep_interval: int = 1000,
        clock: Callable[[], datetime] = utc_now
    ):
        self.max_age = max_age
        self.sweep_interval = sweep_interval
        self.clock = clock
        self.submissions: Dict[str, List[ContentSubmission]] = defaultdict(list)
        self._recorded_since_sweep = 0

    def record(self, submission: ContentSubmission) -> None:
        self.submissions[submission.author_id].append(submission)
        self.prune(submission.author_id)

        # Authors who stopped posting are only dropped by a full sweep
        self._recorded_since_sweep += 1
        if self._recorded_since_sweep >= self.sweep_interval:
            self.prune_all()

    def prune(self, user_id: str) -> None:
        """Drop the author's entries older than max_age."""
        cutoff = self.clock() - self.max_age
        kept = [s for s in self.submissions.get(user_id, []) if s.created_at >= cutoff]
        if kept:
            self.submissions[user_id] = kept
        else:
            self.submissions.pop(user_id, None)

    def prune_all(self) -> None:
        for user_id in list(self.submissions):
            self.prune(user_id)
        self._recorded_since_sweep = 0

    async def get_recent_submissions(
        self,
        user_id: str,
        window: timedelta,
        now: Optional[datetime] = None
    ) -> List[ContentSubmission]:
        if user_id not in self.submissions:
            return []
        self.prune(user_id)
        now = now or self.clock()
        cutoff = now - window
        return [
            s for s in self.submissions.get(user_id, [])
            if cutoff <= s.created_at <= now
        ]


class BehaviorSignalSource(ABC):
    """Produces behavioral signals for an author."""

    @abstractmethod
    async def analyze(self, author_id: str) -> BehavioralAnalysis:
        """Score the author's submission behavior."""


class StaticBehaviorSignalSource(BehaviorSignalSource):
    """
    Placeholder source with no history backing.
    Returns the same neutral-low score for every author.
    """

    PLACEHOLDER_SCORE = 0.1

    async def analyze(self, author_id: str) -> BehavioralAnalysis:
        return BehavioralAnalysis(
            velocity_score=self.PLACEHOLDER_SCORE,
            pattern_score=self.PLACEHOLDER_SCORE,
            timing_score=self.PLACEHOLDER_SCORE,
        )


class HistoryBehaviorSignalSource(BehaviorSignalSource):
    """
    Scores velocity, template posting and timing regularity from the
    author's recent submissions.
    """

    # Velocity limits
    HOURLY_LIMIT = 5    # More than 5 submissions per hour = high velocity
    DAILY_LIMIT = 20    # More than 20 submissions per day = very high velocity

    # Minimum sample sizes
    MIN_PATTERN_SAMPLES = 2
    MIN_TIMING_SAMPLES = 3

    def __init__(
        self,
        history: SubmissionHistory,
        window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now
    ):
        self.history = history
        self.window = window
        self.clock = clock

    async def analyze(self, author_id: str) -> BehavioralAnalysis:
        now = self.clock()
        submissions = await self.history.get_recent_submissions(author_id, self.window, now)
        submissions = sorted(submissions, key=lambda s: s.created_at)

        return BehavioralAnalysis(
            velocity_score=self.velocity_score(submissions, now),
            pattern_score=self.pattern_score(submissions),
            timing_score=self.timing_score(submissions),
        )

    def velocity_score(self, submissions: List[ContentSubmission], now: datetime) -> float:
        """Half score at the rate limit, saturating at twice the limit."""
        hour_ago = now - timedelta(hours=1)
        day_ago = now - timedelta(days=1)

        count_1h = sum(1 for s in submissions if s.created_at >= hour_ago)
        count_24h = sum(1 for s in submissions if s.created_at >= day_ago)

        ratio = max(count_1h / self.HOURLY_LIMIT, count_24h / self.DAILY_LIMIT)
        return clamp(ratio * 0.5)

    def pattern_score(self, submissions: List[ContentSubmission]) -> float:
        """Share of submissions repeating an earlier submission's text."""
        if len(submissions) < self.MIN_PATTERN_SAMPLES:
            return 0.0

        fingerprints = [self._fingerprint(s.content) for s in submissions]
        duplicates = len(fingerprints) - len(set(fingerprints))
        return clamp(duplicates / len(fingerprints))

    def timing_score(self, submissions: List[ContentSubmission]) -> float:
        """
        Regularity of inter-submission intervals.
        Posting at exact intervals scores 1.0.
        """
        if len(submissions) < self.MIN_TIMING_SAMPLES:
            return 0.0

        intervals = [
            (later.created_at - earlier.created_at).total_seconds()
            for earlier, later in zip(submissions, submissions[1:])
        ]
        mean = statistics.fmean(intervals)
        if mean <= 0:
            return 1.0

        variation = statistics.pstdev(intervals) / mean
        return clamp(1.0 - variation)

    @staticmethod
    def _fingerprint(text: str) -> str:
        normalized = " ".join(text.lower().split())
        return hashlib.md5(normalized.encode()).hexdigest()
