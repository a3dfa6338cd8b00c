"""
Enumeration definitions for the Shared Thread moderation pipeline.
Submission kinds, decision statuses, trust levels and reason codes.
"""

from enum import Enum, IntEnum


class SubmissionType(str, Enum):
    """Kinds of user content that pass through moderation."""
    WORK = "work"
    COMMENT = "comment"
    PROFILE = "profile"
    COLLECTION = "collection"


class ModerationStatus(str, Enum):
    """Outcome of moderating a submission."""
    APPROVED = "approved"               # Published immediately
    REJECTED = "rejected"               # Blocked, appealable
    PENDING_REVIEW = "pending_review"   # Routed to a human moderator
    FLAGGED = "flagged"                 # Set by staff tooling only


class TrustLevel(IntEnum):
    """
    User trust levels.
    Higher values = more trusted = more lenient thresholds.
    """
    NEW_USER = 0
    VERIFIED_USER = 1
    TRUSTED_CREATOR = 2
    COMMUNITY_MODERATOR = 3
    STAFF_MODERATOR = 4


class ReasonCode(str, Enum):
    """Reason codes attached to a decision for staff review tooling."""
    # Approval
    AUTOMATED_APPROVAL = "automated_approval"

    # Rejection
    AUTOMATED_SPAM_DETECTION = "automated_spam_detection"
    SPAM_KEYWORDS_DETECTED = "spam_keywords_detected"
    EXCESSIVE_REPETITION = "excessive_repetition"
    SUSPICIOUS_LINKS = "suspicious_links"
    POSTING_TOO_FREQUENTLY = "posting_too_frequently"
    PREVIOUS_POLICY_VIOLATIONS = "previous_policy_violations"

    # Human review
    POTENTIAL_SPAM_KEYWORDS = "potential_spam_keywords"
    ELEVATED_POSTING_FREQUENCY = "elevated_posting_frequency"
    NEW_USER_REVIEW = "new_user_review"
    ROUTINE_QUALITY_CHECK = "routine_quality_check"

    # Failure
    SYSTEM_ERROR = "system_error"


class StrikeType(str, Enum):
    """Categories of strikes issued against an account."""
    SPAM = "spam"
    POLICY_VIOLATION = "policy_violation"
    COMMUNITY_GUIDELINES = "community_guidelines"
    COPYRIGHT = "copyright"
    HARASSMENT = "harassment"


class StrikeSeverity(str, Enum):
    """Strike severity. Drives expiry and reputation penalty."""
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class AppealResult(str, Enum):
    """Staff resolution of an appealed strike."""
    UPHELD = "upheld"
    OVERTURNED = "overturned"
    REDUCED = "reduced"


class ReputationAction(str, Enum):
    """Events that move a user's reputation score."""
    WORK_APPROVED = "work_approved"
    WORK_FEATURED = "work_featured"
    COMMENT_APPROVED = "comment_approved"
    RECEIVED_RATING_5 = "received_rating_5"
    RECEIVED_RATING_4 = "received_rating_4"
    RECEIVED_RATING_3 = "received_rating_3"
    RECEIVED_RATING_2 = "received_rating_2"
    RECEIVED_RATING_1 = "received_rating_1"
    CONTENT_REPORTED_VALID = "content_reported_valid"
    STRIKE_ISSUED = "strike_issued"
    PEER_ENDORSEMENT = "peer_endorsement"
    HELPFUL_REPORT = "helpful_report"
    FALSE_REPORT = "false_report"
    APPEAL_SUCCESSFUL = "appeal_successful"


class AchievementType(str, Enum):
    CONTENT_QUALITY = "content_quality"
    COMMUNITY_CONTRIBUTION = "community_contribution"
    MILESTONE = "milestone"
    SPECIAL_RECOGNITION = "special_recognition"


class SpamCheckCategory(str, Enum):
    """Content kinds accepted by the unified spam checks."""
    WORK = "work"
    COMMENT = "comment"
    PROFILE = "profile"
    COLLECTION = "collection"
    DISCUSSION = "discussion"
    REPLY = "reply"         # No helper; sent through SpamDetector.check
    PROPOSAL = "proposal"
