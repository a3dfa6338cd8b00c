"""
User Reputation Service.
Manages trust levels, strikes and reputation points, and serves the
reputation lookup used by the moderation engine.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, List, Set

from shared_thread_moderation.models.enums import (
    AchievementType, AppealResult, ModerationStatus, ReputationAction, StrikeSeverity,
    StrikeType, SubmissionType, TrustLevel
)
from shared_thread_moderation.models.reputation import (
    DEFAULT_TRUST_LEVELS, Achievement, PublishingLimits, ReputationAccount, Strike,
    TrustLevelConfig, UserReputation
)
from shared_thread_moderation.models.result import ModerationResult
from shared_thread_moderation.models.submission import ContentSubmission, utc_now

logger = logging.getLogger(__name__)


class ReputationError(ValueError):
    """Raised for invalid reputation operations."""


class ReputationProvider(ABC):
    """Lookup collaborator used by the moderation engine."""

    @abstractmethod
    async def get_user_reputation(self, user_id: str) -> UserReputation:
        """Current reputation snapshot for a user."""


class ReputationService(ReputationProvider):
    """
    Reputation system of record, optionally written through to a store.
    Higher reputation = higher trust level = more lenient moderation.
    """

    # Point changes per action
    ACTION_POINTS: Dict[ReputationAction, int] = {
        ReputationAction.WORK_APPROVED: 10,
        ReputationAction.WORK_FEATURED: 50,
        ReputationAction.COMMENT_APPROVED: 2,
        ReputationAction.RECEIVED_RATING_5: 5,
        ReputationAction.RECEIVED_RATING_4: 3,
        ReputationAction.RECEIVED_RATING_3: 1,
        ReputationAction.RECEIVED_RATING_2: -1,
        ReputationAction.RECEIVED_RATING_1: -3,
        ReputationAction.CONTENT_REPORTED_VALID: -20,
        ReputationAction.STRIKE_ISSUED: -100,
        ReputationAction.PEER_ENDORSEMENT: 15,
        ReputationAction.HELPFUL_REPORT: 10,
        ReputationAction.FALSE_REPORT: -5,
        ReputationAction.APPEAL_SUCCESSFUL: 20,
    }

    # Strike expiry and reputation penalty by severity
    STRIKE_EXPIRY_DAYS = {
        StrikeSeverity.MINOR: 30,
        StrikeSeverity.MODERATE: 90,
        StrikeSeverity.SEVERE: 365,
    }
    STRIKE_PENALTIES = {
        StrikeSeverity.MINOR: 50,
        StrikeSeverity.MODERATE: 150,
        StrikeSeverity.SEVERE: 500,
    }

    # Reputation milestones; each awards milestone / 20 bonus points
    REPUTATION_MILESTONES = (100, 500, 1000, 2500, 5000, 10000)
    FIRST_PUBLICATION_BONUS = 25
    PROMOTION_BONUS_PER_LEVEL = 50

    def __init__(
        self,
        trust_levels: Optional[Dict[TrustLevel, TrustLevelConfig]] = None,
        clock: Callable[[], datetime] = utc_now,
        store=None,
        max_cached_accounts: Optional[int] = None
    ):
        """
        Without a store the accounts held here are the system of record.
        With a store (see lib.database) every change is written through and
        at most max_cached_accounts stay in memory.
        """
        self.trust_levels = trust_levels or DEFAULT_TRUST_LEVELS
        self.clock = clock
        self.store = store
        self.max_cached_accounts = max_cached_accounts if store is not None else None
        self.accounts: "OrderedDict[str, ReputationAccount]" = OrderedDict()

    async def get_user_reputation(self, user_id: str) -> UserReputation:
        """
        Reputation snapshot; unknown users get the neutral record.
        Trust level is re-evaluated so expired strikes and account age count.
        """
        account = self.accounts.get(user_id)
        if account is None and self.store is not None:
            account = await asyncio.to_thread(self.get_account, user_id)
        if account is None:
            return UserReputation.neutral(user_id)
        now = self.clock()
        reputation = account.to_reputation(now)
        return reputation.model_copy(update={'trust_level': self.calculate_trust_level(account, now)})

    def get_account(self, user_id: str) -> Optional[ReputationAccount]:
        account = self.accounts.get(user_id)
        if account is not None:
            self.accounts.move_to_end(user_id)
            return account

        if self.store is None:
            return None
        row = self.store.get_reputation_account(user_id)
        if row is None:
            return None
        account = ReputationAccount.model_validate(row)
        self._cache(account)
        return account

    def ensure_account(self, user_id: str, created_at: Optional[datetime] = None) -> ReputationAccount:
        """Get or create the account for a user."""
        account = self.get_account(user_id)
        if account is None:
            now = self.clock()
            account = ReputationAccount(
                user_id=user_id,
                created_at=created_at or now,
                updated_at=now,
            )
            self._cache(account)
        return account

    def _cache(self, account: ReputationAccount) -> None:
        self.accounts[account.user_id] = account
        self.accounts.move_to_end(account.user_id)
        if self.max_cached_accounts is not None:
            while len(self.accounts) > self.max_cached_accounts:
                self.accounts.popitem(last=False)

    def save(self, account: ReputationAccount) -> None:
        """Write the account through to the store, if one is configured."""
        if self.store is None:
            return
        snapshot = account.to_reputation(self.clock())
        self.store.upsert_user_reputation(
            snapshot.model_dump(mode='json'),
            account.model_dump(mode='json'),
        )

    def apply_action(self, user_id: str, action: ReputationAction) -> ReputationAccount:
        """Apply a reputation event, recalculate trust level and award achievements."""
        account = self.ensure_account(user_id)
        now = self.clock()
        points = self.ACTION_POINTS[action]

        previous_score = account.reputation_score
        previous_level = account.trust_level
        held = {a.title for a in account.achievements}
        first_publication = (
            action == ReputationAction.WORK_APPROVED and "First Publication" not in held
        )

        account.reputation_score = max(0.0, account.reputation_score + points)
        self._update_history(account, action, now)
        self._refresh_trust_level(account, now)

        earned = self._check_achievements(
            account, previous_score, previous_level, first_publication, held, now
        )
        account.achievements.extend(earned)

        logger.info(
            f"Reputation change for {user_id}: {action.value} ({points:+d}) "
            f"-> score={account.reputation_score:.0f} trust={int(account.trust_level)}"
        )
        for achievement in earned:
            logger.info(f"Achievement for {user_id}: {achievement.title}")

        self.save(account)
        return account

    def _check_achievements(
        self,
        account: ReputationAccount,
        previous_score: float,
        previous_level: TrustLevel,
        first_publication: bool,
        held: Set[str],
        now: datetime
    ) -> List[Achievement]:
        # Bonuses are recorded on the achievement, not added to the score.
        # Milestones are awarded once even if the score dips and recovers.
        earned: List[Achievement] = []

        if first_publication:
            earned.append(Achievement(
                type=AchievementType.MILESTONE,
                title="First Publication",
                description="Published your first work on Shared Thread",
                reputation_bonus=self.FIRST_PUBLICATION_BONUS,
                earned_at=now,
            ))

        for milestone in self.REPUTATION_MILESTONES:
            title = f"{milestone} Reputation"
            if previous_score < milestone <= account.reputation_score and title not in held:
                earned.append(Achievement(
                    type=AchievementType.MILESTONE,
                    title=title,
                    description=f"Reached {milestone} reputation points",
                    reputation_bonus=milestone // 20,
                    earned_at=now,
                ))

        if account.trust_level > previous_level:
            level_config = self.trust_levels[account.trust_level]
            earned.append(Achievement(
                type=AchievementType.SPECIAL_RECOGNITION,
                title=f"Promoted to {level_config.name}",
                description=level_config.description,
                reputation_bonus=int(account.trust_level) * self.PROMOTION_BONUS_PER_LEVEL,
                earned_at=now,
            ))

        return earned

    def _update_history(self, account: ReputationAccount, action: ReputationAction, now: datetime) -> None:
        if action in (ReputationAction.WORK_APPROVED, ReputationAction.COMMENT_APPROVED):
            account.approved_submissions += 1
            account.total_submissions += 1
        elif action == ReputationAction.CONTENT_REPORTED_VALID:
            account.rejected_submissions += 1
            account.community_reports += 1
            account.last_violation = now
        elif action == ReputationAction.STRIKE_ISSUED:
            account.last_violation = now
        elif action == ReputationAction.APPEAL_SUCCESSFUL:
            account.appeals_successful += 1
        elif action == ReputationAction.PEER_ENDORSEMENT:
            account.peer_endorsements += 1
        elif action == ReputationAction.HELPFUL_REPORT:
            account.helpful_reports += 1
        elif action == ReputationAction.FALSE_REPORT:
            account.false_reports += 1
        account.updated_at = now

    def record_outcome(self, submission: ContentSubmission, result: ModerationResult) -> ReputationAccount:
        """Fold a moderation outcome into the author's history."""
        if result.status == ModerationStatus.APPROVED:
            action = (
                ReputationAction.WORK_APPROVED
                if submission.type == SubmissionType.WORK
                else ReputationAction.COMMENT_APPROVED
            )
            return self.apply_action(submission.author_id, action)

        account = self.ensure_account(submission.author_id)
        account.total_submissions += 1
        if result.status == ModerationStatus.REJECTED:
            account.rejected_submissions += 1
        else:
            account.pending_submissions += 1
        account.updated_at = self.clock()
        self.save(account)
        return account

    def issue_strike(
        self,
        user_id: str,
        strike_type: StrikeType,
        severity: StrikeSeverity,
        description: str,
        evidence: List[str],
        issued_by: str
    ) -> Strike:
        """Issue a strike, apply its penalty and recalculate trust level."""
        account = self.ensure_account(user_id)
        now = self.clock()

        strike = Strike(
            type=strike_type,
            severity=severity,
            description=description,
            evidence=evidence,
            issued_by=issued_by,
            issued_at=now,
            expires_at=now + timedelta(days=self.STRIKE_EXPIRY_DAYS[severity]),
        )
        account.strikes.append(strike)
        account.reputation_score = max(0.0, account.reputation_score - self.STRIKE_PENALTIES[severity])
        account.last_violation = now
        account.updated_at = now
        self._refresh_trust_level(account, now)
        self.save(account)

        logger.info(
            f"Strike issued: user={user_id} strike={strike.id} type={strike_type.value} "
            f"severity={severity.value} by={issued_by}"
        )
        return strike

    def appeal_strike(self, user_id: str, strike_id: str) -> Strike:
        """Mark a strike as appealed."""
        account = self.ensure_account(user_id)
        strike = self._find_strike(account, strike_id)
        if strike.appealed:
            raise ReputationError(f"Strike {strike_id} has already been appealed")
        strike.appealed = True
        account.appeals_filed += 1
        account.updated_at = self.clock()
        self.save(account)
        return strike

    def resolve_strike_appeal(self, user_id: str, strike_id: str, result: AppealResult) -> Strike:
        """
        Apply a staff appeal resolution.
        Overturned strikes stop counting; reduced strikes expire as if minor.
        """
        account = self.ensure_account(user_id)
        strike = self._find_strike(account, strike_id)
        if not strike.appealed:
            raise ReputationError(f"Strike {strike_id} has not been appealed")

        strike.appeal_result = result
        if result == AppealResult.OVERTURNED:
            self.apply_action(user_id, ReputationAction.APPEAL_SUCCESSFUL)
        elif result == AppealResult.REDUCED:
            strike.expires_at = min(
                strike.expires_at,
                strike.issued_at + timedelta(days=self.STRIKE_EXPIRY_DAYS[StrikeSeverity.MINOR])
            )
            self._refresh_trust_level(account, self.clock())
            self.save(account)

        logger.info(f"Strike appeal resolved: user={user_id} strike={strike_id} result={result.value}")
        return strike

    def overturn_strike(self, user_id: str, strike_id: str) -> Strike:
        """Appeal and overturn a strike in one step."""
        strike = self._find_strike(self.ensure_account(user_id), strike_id)
        if not strike.appealed:
            self.appeal_strike(user_id, strike_id)
        return self.resolve_strike_appeal(user_id, strike_id, AppealResult.OVERTURNED)

    def _find_strike(self, account: ReputationAccount, strike_id: str) -> Strike:
        for strike in account.strikes:
            if strike.id == strike_id:
                return strike
        raise ReputationError(f"Unknown strike {strike_id} for user {account.user_id}")

    def calculate_trust_level(self, account: ReputationAccount, at: Optional[datetime] = None) -> TrustLevel:
        """Highest trust level whose requirements the account meets."""
        at = at or self.clock()
        active_strikes = len(account.active_strikes(at))
        age_days = account.account_age_days(at)

        for level in sorted(self.trust_levels, reverse=True):
            req = self.trust_levels[level].requirements
            meets = (
                account.reputation_score >= req.min_reputation and
                account.approved_submissions >= req.min_approved_submissions and
                active_strikes <= req.max_strikes and
                age_days >= req.account_age_days and
                (req.community_endorsements is None or
                 account.peer_endorsements >= req.community_endorsements)
            )
            if meets:
                return TrustLevel(level)

        return TrustLevel.NEW_USER

    def _refresh_trust_level(self, account: ReputationAccount, now: datetime) -> None:
        previous = account.trust_level
        account.trust_level = self.calculate_trust_level(account, now)
        if account.trust_level != previous:
            logger.info(
                f"Trust level for {account.user_id}: {int(previous)} -> {int(account.trust_level)} "
                f"({self.trust_levels[account.trust_level].name})"
            )

    def get_trust_level_config(self, level: TrustLevel) -> TrustLevelConfig:
        return self.trust_levels[level]

    async def user_has_privilege(self, user_id: str, privilege: str) -> bool:
        reputation = await self.get_user_reputation(user_id)
        return privilege in self.trust_levels[reputation.trust_level].privileges

    async def get_user_limits(self, user_id: str) -> PublishingLimits:
        reputation = await self.get_user_reputation(user_id)
        return self.trust_levels[reputation.trust_level].publishing_limits


class PostgresReputationProvider(ReputationProvider):
    """Reads reputation snapshots from the user_reputation table."""

    def __init__(self, database=None):
        if database is None:
            from shared_thread_moderation.lib.database import get_db
            database = get_db()
        self.database = database

    async def get_user_reputation(self, user_id: str) -> UserReputation:
        row = await asyncio.to_thread(self.database.get_user_reputation, user_id)
        if row is None:
            return UserReputation.neutral(user_id)
        return UserReputation.model_validate(row)
