"""
Content Analyzer - text and link spam signals.
Keyword, repetition, link and sentiment scoring over submitted text.
Each sub-score is computed independently and clamped to [0, 1].
"""

import re
from collections import Counter
from typing import List, Optional

from shared_thread_moderation.config import ModerationConfig
from shared_thread_moderation.models.signals import ContentAnalysis, clamp
from shared_thread_moderation.models.submission import ContentSubmission


URL_PATTERN = re.compile(r'https?://[^\s]+')


class ContentAnalyzer:
    """
    Extracts spam-indicative signals from submitted text.
    Word lists and increments come from ModerationConfig.
    """

    def __init__(self, config: Optional[ModerationConfig] = None):
        self.config = config or ModerationConfig()

        # Compile patterns once
        self.suspicious_regex = [re.compile(p) for p in self.config.suspicious_patterns]

    def analyze(self, submission: ContentSubmission) -> ContentAnalysis:
        """Compute all four content sub-scores for a submission."""
        content = submission.content
        return ContentAnalysis(
            keyword_spam_score=self.keyword_spam_score(content),
            repetition_score=self.repetition_score(content),
            link_spam_score=self.link_spam_score(content, submission.metadata.media_urls),
            sentiment_score=self.sentiment_score(content),
        )

    def keyword_spam_score(self, content: str) -> float:
        """
        +keyword_increment per spam phrase present (case-insensitive),
        +pattern_increment per suspicious pattern match instance.
        """
        score = 0.0
        content_lower = content.lower()

        for keyword in self.config.spam_keywords:
            if keyword in content_lower:
                score += self.config.keyword_increment

        for regex in self.suspicious_regex:
            matches = regex.findall(content)
            score += len(matches) * self.config.pattern_increment

        return clamp(score)

    def repetition_score(self, content: str) -> float:
        """
        Every word longer than min_word_length seen more than once adds
        (count / total_words) * repetition_weight. Very repetitive short
        texts saturate at 1.0.
        """
        words = content.lower().split()
        total_words = len(words)
        if total_words == 0:
            return 0.0

        counts = Counter(w for w in words if len(w) > self.config.min_word_length)

        score = 0.0
        for count in counts.values():
            if count > 1:
                score += (count / total_words) * self.config.repetition_weight

        return clamp(score)

    def link_spam_score(self, content: str, media_urls: Optional[List[str]] = None) -> float:
        """Penalize link-heavy content and URL shorteners."""
        urls = self.extract_urls(content) + list(media_urls or [])
        if not urls:
            return 0.0

        score = 0.0
        if len(urls) > self.config.max_links:
            score += self.config.excess_links_penalty

        for url in urls:
            for domain in self.config.shortener_domains:
                if domain in url:
                    score += self.config.shortener_penalty

        return clamp(score)

    def sentiment_score(self, content: str) -> float:
        """Higher of the negative and promotional word buckets."""
        content_lower = content.lower()
        increment = self.config.sentiment_increment

        negative = sum(increment for w in self.config.negative_words if w in content_lower)
        promotional = sum(increment for w in self.config.promotional_words if w in content_lower)

        return clamp(max(negative, promotional))

    @staticmethod
    def extract_urls(content: str) -> List[str]:
        return URL_PATTERN.findall(content)
