"""
Experience award calculation from finished games
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from zoneinfo import ZoneInfo

from ..game.session import GameEndReason, GameSession
from .ledger import GAMES_PLAYED, DailyActivity, DailyLedger, LedgerKey

logger = logging.getLogger(__name__)

COMPLETION_BONUS = 20
VICTORY_BONUS = 50
CLOSE_DEFEAT_BONUS = 15
FIRST_GAME_BONUS = 20
FIVE_GAMES_BONUS = 30
FIVE_GAMES_THRESHOLD = 5
LONG_GAME_BONUS = 10
LONG_GAME_WORDS = 10
PERFECT_GAME_BONUS = 15
PERFECT_GAME_MIN_LENGTH = 3
PERFECT_GAME_MIN_WORDS = 3


class GameOutcome(Enum):
    """How a game ended for one player"""

    VICTORY = "victory"
    DEFEAT = "defeat"
    CLOSE_DEFEAT = "close_defeat"
    FORFEIT = "forfeit"


OUTCOME_BONUS = {
    GameOutcome.VICTORY: VICTORY_BONUS,
    GameOutcome.CLOSE_DEFEAT: CLOSE_DEFEAT_BONUS,
    GameOutcome.DEFEAT: 0,
    GameOutcome.FORFEIT: 0,
}

# Decides whether a defeated player lost narrowly
CloseDefeatRule = Callable[[GameSession, str], bool]

CLOSE_DEFEAT_END_REASONS = (GameEndReason.TIME_UP, GameEndReason.AI_FAILED)


def timeout_close_defeat(session: GameSession, player_id: str) -> bool:
    """Close defeat for every non-winner of a game that ran out of time or AI moves"""
    return session.end_reason in CLOSE_DEFEAT_END_REASONS and session.winner != player_id


def min_words_close_defeat(min_words: int) -> CloseDefeatRule | None:
    """Close defeat when the loser played at least `min_words` words; 0 disables it"""
    if min_words <= 0:
        return None

    def rule(session: GameSession, player_id: str) -> bool:
        return len(session.words_by(player_id)) >= min_words

    return rule


def build_close_defeat_rule(name: str, min_words: int = 0) -> CloseDefeatRule | None:
    """
    Resolve a configured close defeat rule by name

    Args:
        name: "timeout", "min_words" or "none"
        min_words: Word threshold for the "min_words" rule

    Returns:
        The rule, or None when close defeats are disabled
    """
    if name == "timeout":
        return timeout_close_defeat
    if name == "min_words":
        return min_words_close_defeat(min_words)
    if name == "none":
        return None
    raise ValueError(f"Unknown close defeat rule: {name}")


@dataclass
class ExperienceBreakdown:
    """Experience earned from one game, split by source"""

    game_completion: int = 0
    word_experience: int = 0
    word_count: int = 0
    game_result: int = 0
    bonus: int = 0
    # Daily bonus flags this breakdown was granted
    daily_keys: list[LedgerKey] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.game_completion + self.word_experience + self.game_result + self.bonus

    @property
    def description(self) -> str:
        parts = []
        if self.game_completion > 0:
            parts.append(f"게임 완주: +{self.game_completion}")
        if self.word_experience > 0:
            parts.append(f"단어 {self.word_count}개: +{self.word_experience}")
        if self.game_result > 0:
            parts.append(f"게임 결과: +{self.game_result}")
        if self.bonus > 0:
            parts.append(f"보너스: +{self.bonus}")
        return ", ".join(parts)


class ExperienceCalculator:
    """Combines completion, word, outcome and situational experience"""

    def __init__(self, ledger: DailyLedger, timezone: str = "UTC"):
        self.ledger = ledger
        self.timezone = ZoneInfo(timezone)

    def today(self) -> date:
        """Current calendar day in the configured timezone"""
        return datetime.now(self.timezone).date()

    def compute_breakdown(
        self,
        session: GameSession,
        player_id: str,
        outcome: GameOutcome,
        on_date: date | None = None,
        claim: bool = True,
    ) -> ExperienceBreakdown:
        """
        Compute the experience a player earned in a finished game

        Args:
            session: Finished game session
            player_id: Player to compute the award for
            outcome: How the game ended for this player
            on_date: Calendar day for daily bonuses (defaults to today
                in the calculator's timezone)
            claim: Mark granted daily bonuses in the ledger right away;
                pass False and call claim_daily_bonuses() later to
                claim them only once the award is stored

        Returns:
            ExperienceBreakdown with every source filled in
        """
        if on_date is None:
            on_date = self.today()

        breakdown = ExperienceBreakdown()

        if outcome is not GameOutcome.FORFEIT:
            breakdown.game_completion = COMPLETION_BONUS

        for game_word in session.words_by(player_id):
            breakdown.word_experience += game_word.word.experience_points
            breakdown.word_count += 1

        breakdown.game_result = OUTCOME_BONUS[outcome]
        breakdown.bonus = self._calculate_bonus(session, player_id, on_date, breakdown)

        if claim:
            self.claim_daily_bonuses(breakdown)

        logger.info(
            f"Experience for {player_id} in session {session.session_id}: "
            f"outcome={outcome.value}, total={breakdown.total} ({breakdown.description})"
        )
        return breakdown

    def claim_daily_bonuses(self, breakdown: ExperienceBreakdown) -> None:
        """Record the daily bonuses of a breakdown so they are not granted again"""
        for key in breakdown.daily_keys:
            self.ledger.set_flag(key)

    def _calculate_bonus(
        self,
        session: GameSession,
        player_id: str,
        on_date: date,
        breakdown: ExperienceBreakdown,
    ) -> int:
        bonus = 0

        first_game_key = LedgerKey.for_activity(DailyActivity.FIRST_GAME, on_date, player_id)
        if not self.ledger.has_flag(first_game_key):
            breakdown.daily_keys.append(first_game_key)
            bonus += FIRST_GAME_BONUS

        five_games_key = LedgerKey.for_activity(DailyActivity.FIVE_GAMES, on_date, player_id)
        if not self.ledger.has_flag(five_games_key):
            games_today = self.ledger.get_count(
                LedgerKey.for_activity(GAMES_PLAYED, on_date, player_id)
            )
            if games_today >= FIVE_GAMES_THRESHOLD:
                breakdown.daily_keys.append(five_games_key)
                bonus += FIVE_GAMES_BONUS

        if len(session.words) >= LONG_GAME_WORDS:
            bonus += LONG_GAME_BONUS

        player_words = session.words_by(player_id)
        if len(player_words) >= PERFECT_GAME_MIN_WORDS and all(
            game_word.word.length >= PERFECT_GAME_MIN_LENGTH for game_word in player_words
        ):
            bonus += PERFECT_GAME_BONUS

        return bonus
