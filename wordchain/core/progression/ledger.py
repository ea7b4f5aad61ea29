"""
Daily activity ledger used for once-per-day bonuses
"""

import logging
from datetime import date
from enum import Enum
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)


class DailyActivity(Enum):
    """Activities rewarded at most once per calendar day"""

    FIRST_GAME = "first_game"
    FIVE_GAMES = "five_games"
    DAILY_MISSION = "daily_mission"
    WEEKLY_RANKING = "weekly_ranking"

    @property
    def experience_reward(self) -> int:
        return {
            DailyActivity.FIRST_GAME: 20,
            DailyActivity.FIVE_GAMES: 30,
            DailyActivity.DAILY_MISSION: 50,
            DailyActivity.WEEKLY_RANKING: 100,
        }[self]

    @property
    def display_name(self) -> str:
        return {
            DailyActivity.FIRST_GAME: "첫 게임",
            DailyActivity.FIVE_GAMES: "5게임 달성",
            DailyActivity.DAILY_MISSION: "일일 미션 완료",
            DailyActivity.WEEKLY_RANKING: "주간 랭킹 10위 내",
        }[self]


# Counter activity, not a bonus: number of games finished on a day
GAMES_PLAYED = "game_count"


class LedgerKey(NamedTuple):
    """(activity, calendar day, player) identifying one ledger entry"""

    activity: str
    day: date
    player_id: str

    @classmethod
    def for_activity(
        cls, activity: DailyActivity | str, day: date, player_id: str
    ) -> "LedgerKey":
        name = activity.value if isinstance(activity, DailyActivity) else activity
        return cls(name, day, str(player_id))

    def as_string(self) -> str:
        return f"{self.activity}:{self.day.isoformat()}:{self.player_id}"


class DailyLedger(Protocol):
    """Flag and counter store keyed by LedgerKey"""

    def has_flag(self, key: LedgerKey) -> bool: ...

    def set_flag(self, key: LedgerKey) -> None: ...

    def get_count(self, key: LedgerKey) -> int: ...

    def increment_count(self, key: LedgerKey) -> int: ...


class InMemoryDailyLedger:
    """Process-local ledger, used when no database is configured"""

    def __init__(self):
        self._flags: set[LedgerKey] = set()
        self._counts: dict[LedgerKey, int] = {}

    def has_flag(self, key: LedgerKey) -> bool:
        return key in self._flags

    def set_flag(self, key: LedgerKey) -> None:
        self._flags.add(key)

    def get_count(self, key: LedgerKey) -> int:
        return self._counts.get(key, 0)

    def increment_count(self, key: LedgerKey) -> int:
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]
