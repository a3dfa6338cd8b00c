"""
Moderation configuration.
Thresholds and word lists are data, loadable from JSON without a redeploy.
"""

import json
import os
import logging
from pathlib import Path
from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


DEFAULT_SPAM_KEYWORDS = [
    'click here', 'buy now', 'limited time', 'act now', 'free money',
    'make money fast', 'work from home', 'get rich quick', 'no experience',
    'guaranteed income', 'earn $$$', 'miracle cure', 'lose weight fast',
]

DEFAULT_SUSPICIOUS_PATTERNS = [
    r'\b[A-Z]{3,}\b',       # Excessive caps
    r'!{3,}',               # Multiple exclamation marks
    r'\$+[\d,]+',           # Money amounts
    r'https?://[^\s]+',     # URLs
]

DEFAULT_SHORTENER_DOMAINS = ['bit.ly', 'tinyurl.com', 'shorturl.at', 't.co']

DEFAULT_NEGATIVE_WORDS = [
    'hate', 'terrible', 'awful', 'disgusting', 'worst', 'horrible',
    'scam', 'fraud', 'fake', 'lies', 'stupid', 'idiot',
]

DEFAULT_PROMOTIONAL_WORDS = [
    'amazing', 'incredible', 'revolutionary', 'breakthrough', 'exclusive',
    'limited', 'special', 'bonus', 'discount', 'offer',
]


class Thresholds(BaseModel):
    """Global decision thresholds on the overall spam probability."""
    auto_approve: float = Field(ge=0.0, le=1.0, default=0.9)   # spam <= threshold
    human_review: float = Field(ge=0.0, le=1.0, default=0.5)   # implicit middle band
    auto_reject: float = Field(ge=0.0, le=1.0, default=0.1)    # spam >= threshold


class ModerationConfig(BaseModel):
    """
    Tunable inputs of the scoring pipeline.
    Defaults reproduce the production tuning.
    """
    thresholds: Thresholds = Field(default_factory=Thresholds)
    trust_bonus_per_level: float = 0.1
    appeal_window_days: int = Field(gt=0, default=30)

    # Content analysis
    spam_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_SPAM_KEYWORDS))
    suspicious_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_SUSPICIOUS_PATTERNS))
    keyword_increment: float = 0.1
    pattern_increment: float = 0.05
    min_word_length: int = 3   # words of this length or shorter are ignored
    repetition_weight: float = 0.5
    shortener_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_SHORTENER_DOMAINS))
    max_links: int = 3
    excess_links_penalty: float = 0.3
    shortener_penalty: float = 0.2
    negative_words: List[str] = Field(default_factory=lambda: list(DEFAULT_NEGATIVE_WORDS))
    promotional_words: List[str] = Field(default_factory=lambda: list(DEFAULT_PROMOTIONAL_WORDS))
    sentiment_increment: float = 0.1

    # Collaborator timeouts
    reputation_timeout_seconds: float = Field(gt=0, default=2.0)
    audit_timeout_seconds: float = Field(gt=0, default=2.0)

    system_version: str = "1.0"

    @field_validator('spam_keywords', 'negative_words', 'promotional_words')
    @classmethod
    def _lowercase(cls, words: List[str]) -> List[str]:
        # Matching is done against lower-cased content
        return [w.lower() for w in words]

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ModerationConfig":
        """Load configuration from a JSON document."""
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
        logger.info(f"Loaded moderation config from {path}")
        return cls.model_validate(data)


def load_config(path: Optional[str] = None) -> ModerationConfig:
    """
    Build configuration from the environment.
    MODERATION_CONFIG_PATH points at a JSON file; MODERATION_SYSTEM_VERSION
    overrides the audit version tag.
    """
    path = path or os.getenv('MODERATION_CONFIG_PATH')
    config = ModerationConfig.from_file(path) if path else ModerationConfig()

    version = os.getenv('MODERATION_SYSTEM_VERSION')
    if version:
        config = config.model_copy(update={'system_version': version})
    return config
