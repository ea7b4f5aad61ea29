"""
Progression engine: applies experience to users and detects level-ups
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Protocol

from ...level_system import MAX_LEVEL, LevelSystem, get_level_system
from ..database.models import User
from ..game.session import GameSession
from .experience import ExperienceBreakdown, ExperienceCalculator, GameOutcome
from .ledger import GAMES_PLAYED, DailyActivity, DailyLedger, InMemoryDailyLedger, LedgerKey

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """User record storage used by the engine"""

    def get_user(self, player_id: str) -> User | None: ...

    def put_user(self, user: User) -> bool: ...


class ExperienceBooster(Enum):
    """Experience booster items"""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def multiplier(self) -> float:
        return {
            ExperienceBooster.SMALL: 1.2,
            ExperienceBooster.MEDIUM: 1.5,
            ExperienceBooster.LARGE: 2.0,
        }[self]

    @property
    def display_name(self) -> str:
        return {
            ExperienceBooster.SMALL: "소형 경험치 부스터",
            ExperienceBooster.MEDIUM: "중형 경험치 부스터",
            ExperienceBooster.LARGE: "대형 경험치 부스터",
        }[self]


@dataclass
class LevelUpEvent:
    """Raised when an experience award crosses into a higher level"""

    player_name: str
    previous_level: int
    new_level: int
    new_title: str
    experience_gained: int
    timestamp: datetime = field(default_factory=datetime.now)
    # Rewards of every reward level crossed, lowest first
    rewards: list[str] = field(default_factory=list)

    @property
    def level_up_message(self) -> str:
        return f"🎉 {self.player_name}님이 레벨 {self.new_level}에 도달했습니다!"

    @property
    def title_message(self) -> str:
        return f"새로운 칭호: {self.new_title}"


@dataclass
class AwardError:
    """Categorized failure reported alongside an award"""

    kind: str
    reason: str


@dataclass
class ExperienceAward:
    """Result of awarding a finished game to one player"""

    player_id: str
    outcome: GameOutcome
    breakdown: ExperienceBreakdown
    level_up: LevelUpEvent | None = None
    persisted: bool = True
    error: AwardError | None = None


@dataclass
class ExperienceStats:
    """Progress summary of a user"""

    current_level: int
    current_experience: int
    experience_to_next_level: int
    level_progress: float
    total_experience_needed: int
    level_title: str
    is_max_level: bool


@dataclass
class ExperienceSimulation:
    """What-if result of adding experience"""

    before_level: int
    after_level: int
    level_ups_gained: int
    total_experience: int
    experience_gained: int

    @property
    def will_level_up(self) -> bool:
        return self.level_ups_gained > 0


def level_up_reward(level: int) -> str | None:
    """Cosmetic reward announced when a level is reached"""
    rewards = {
        5: "레벨 5 보상: 첫 번째 모자 획득!",
        10: "레벨 10 보상: 특별 뱃지 획득!",
        20: "레벨 20 보상: 희귀 의상 획득!",
        50: "레벨 50 보상: 전설 아이템 획득!",
    }
    if level in rewards:
        return rewards[level]
    if level % 10 == 0:
        return f"레벨 {level} 보상: 특별 아이템 획득!"
    return None


def level_up_rewards(previous_level: int, new_level: int) -> list[str]:
    """Rewards of every level above previous_level up to and including new_level"""
    rewards = []
    for level in range(previous_level + 1, new_level + 1):
        reward = level_up_reward(level)
        if reward:
            rewards.append(reward)
    return rewards


class ProgressionEngine:
    """Turns game results into experience, levels and level-up events"""

    def __init__(
        self,
        ledger: DailyLedger | None = None,
        user_store: UserStore | None = None,
        level_system: LevelSystem | None = None,
        timezone: str = "UTC",
    ):
        self.ledger = ledger if ledger is not None else InMemoryDailyLedger()
        self.user_store = user_store
        self.level_system = level_system or get_level_system()
        self.calculator = ExperienceCalculator(self.ledger, timezone)
        self._level_up_listeners: list[Callable[[LevelUpEvent], None]] = []

    def add_level_up_listener(self, listener: Callable[[LevelUpEvent], None]):
        self._level_up_listeners.append(listener)

    def today(self) -> date:
        """Current calendar day in the configured timezone"""
        return self.calculator.today()

    def apply_experience(self, amount: int, user: User | None) -> LevelUpEvent | None:
        """
        Add experience to a user record and report a level-up

        Args:
            amount: Experience to add; non-positive amounts are ignored
            user: User record, updated in place

        Returns:
            LevelUpEvent if the user reached a higher level, otherwise None
        """
        if user is None or amount <= 0:
            return None

        previous_level = user["level"]
        user["experience"] += amount

        level_info = self.level_system.get_level_info(user["experience"])
        user["level"] = level_info.current_level

        logger.info(
            f"Experience added: {user['nickname']} +{amount} EXP "
            f"(total {user['experience']} EXP)"
        )

        if level_info.current_level <= previous_level:
            return None

        event = LevelUpEvent(
            player_name=user["nickname"],
            previous_level=previous_level,
            new_level=level_info.current_level,
            new_title=level_info.title,
            experience_gained=amount,
            rewards=level_up_rewards(previous_level, level_info.current_level),
        )
        logger.info(
            f"Level up! {user['nickname']}: Lv.{previous_level} -> Lv.{event.new_level}"
        )
        for reward in event.rewards:
            logger.info(reward)

        self._notify_level_up(event)
        return event

    def award_game(
        self,
        session: GameSession,
        player_id: str,
        outcome: GameOutcome,
        on_date: date | None = None,
    ) -> ExperienceAward | None:
        """Award a finished game to a player; unknown players are skipped"""
        if self.user_store is None:
            return None

        user = self.user_store.get_user(player_id)
        if user is None:
            logger.info(f"No user record for {player_id}, skipping experience award")
            return None

        if on_date is None:
            on_date = self.today()

        self.ledger.increment_count(LedgerKey.for_activity(GAMES_PLAYED, on_date, player_id))
        breakdown = self.calculator.compute_breakdown(
            session, player_id, outcome, on_date, claim=False
        )
        level_up = self.apply_experience(breakdown.total, user)
        self._update_game_stats(user, session, player_id, outcome)

        award = ExperienceAward(
            player_id=player_id,
            outcome=outcome,
            breakdown=breakdown,
            level_up=level_up,
        )
        self._persist(user, award)
        # Daily bonuses stay available until the award is stored
        if award.persisted:
            self.calculator.claim_daily_bonuses(breakdown)
        return award

    def award_daily_activity(
        self, user: User | None, activity: DailyActivity, on_date: date | None = None
    ) -> int:
        """Grant a daily activity reward once per day; returns the amount granted"""
        if user is None:
            return 0
        if on_date is None:
            on_date = self.today()

        key = LedgerKey.for_activity(activity, on_date, user["id"])
        if self.ledger.has_flag(key):
            return 0

        amount = activity.experience_reward
        self.apply_experience(amount, user)
        self.ledger.set_flag(key)
        logger.info(f"Daily activity reward: {activity.display_name} +{amount} EXP")
        return amount

    def experience_to_next_level(self, user: User) -> int:
        level_info = self.level_system.get_level_info(user["experience"])
        return max(0, level_info.exp_for_next_level - user["experience"])

    def level_progress(self, user: User) -> float:
        return self.level_system.get_level_info(user["experience"]).progress_to_next_level

    def get_experience_stats(self, user: User) -> ExperienceStats:
        level_info = self.level_system.get_level_info(user["experience"])
        return ExperienceStats(
            current_level=level_info.current_level,
            current_experience=user["experience"],
            experience_to_next_level=self.experience_to_next_level(user),
            level_progress=level_info.progress_to_next_level,
            total_experience_needed=level_info.exp_for_next_level,
            level_title=level_info.title,
            is_max_level=level_info.current_level >= MAX_LEVEL,
        )

    def simulate_experience(self, current_exp: int, added_exp: int) -> ExperienceSimulation:
        before = self.level_system.get_level_from_exp(current_exp)
        after = self.level_system.get_level_from_exp(current_exp + added_exp)
        return ExperienceSimulation(
            before_level=before,
            after_level=after,
            level_ups_gained=after - before,
            total_experience=current_exp + added_exp,
            experience_gained=added_exp,
        )

    @staticmethod
    def apply_multiplier(multiplier: float, amount: int) -> int:
        return int(amount * multiplier)

    @staticmethod
    def apply_booster(booster: ExperienceBooster, amount: int) -> int:
        return int(amount * booster.multiplier)

    def _update_game_stats(
        self, user: User, session: GameSession, player_id: str, outcome: GameOutcome
    ) -> None:
        user["total_games"] += 1
        user["total_words"] += len(session.words_by(player_id))

        if outcome is GameOutcome.VICTORY:
            user["wins"] += 1
            user["current_streak"] += 1
            user["longest_streak"] = max(user["longest_streak"], user["current_streak"])
        else:
            user["current_streak"] = 0

        user["updated_at"] = datetime.now()

    def _persist(self, user: User, award: ExperienceAward) -> None:
        try:
            saved = self.user_store.put_user(user)
        except Exception as e:
            logger.error(f"Error saving user {user['id']}: {e}")
            saved = False

        if not saved:
            award.persisted = False
            award.error = AwardError(
                kind="storage", reason=f"사용자 {user['id']} 저장에 실패했습니다."
            )
            logger.error(f"Experience award for {user['id']} was not persisted")

    def _notify_level_up(self, event: LevelUpEvent) -> None:
        for listener in self._level_up_listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Level-up listener failed: {e}", exc_info=True)
