"""
Tests for the progression engine
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from wordchain.core.game.session import GameEndReason, GameMode, GameSession
from wordchain.core.progression.engine import (
    ExperienceBooster,
    ProgressionEngine,
    level_up_reward,
    level_up_rewards,
)
from wordchain.core.progression.experience import GameOutcome
from wordchain.core.progression.ledger import DailyActivity, InMemoryDailyLedger, LedgerKey
from wordchain.dictionary import WordDictionary

TODAY = date(2024, 3, 1)
EIGHT_WORD_CHAIN = ["사과", "과자", "자두", "두부", "부침개", "개미", "미역", "역사"]


def make_user(user_id="u1", experience=0, level=1):
    return {
        "id": user_id,
        "nickname": "테스터",
        "level": level,
        "experience": experience,
        "total_games": 0,
        "wins": 0,
        "total_words": 0,
        "current_streak": 0,
        "longest_streak": 0,
        "created_at": None,
        "updated_at": None,
    }


def play_session(words, winner="u1"):
    session = GameSession(GameMode.AI_PLAYER, ["u1", "ai"], WordDictionary())
    session.start()
    for word in words:
        session.submit_word(word, session.current_player)
    session.end_game(winner=winner, reason=GameEndReason.TIME_UP)
    return session


class InMemoryUserStore:
    """Dict-backed user store"""

    def __init__(self, *users):
        self.users = {user["id"]: user for user in users}
        self.saved = []

    def get_user(self, player_id):
        return self.users.get(player_id)

    def put_user(self, user):
        self.saved.append(dict(user))
        self.users[user["id"]] = user
        return True


class TestApplyExperience:
    """Test ProgressionEngine.apply_experience"""

    @pytest.fixture
    def engine(self):
        return ProgressionEngine()

    def test_level_up_event(self, engine):
        user = make_user(experience=2550, level=10)

        event = engine.apply_experience(90, user)

        assert user["experience"] == 2640
        assert user["level"] == 11
        assert event is not None
        assert event.previous_level == 10
        assert event.new_level == 11
        assert event.new_title == "초보자"
        assert event.experience_gained == 90
        assert event.player_name == "테스터"
        assert "11" in event.level_up_message

    def test_no_level_up(self, engine):
        user = make_user(experience=10)

        assert engine.apply_experience(50, user) is None
        assert user["experience"] == 60
        assert user["level"] == 1

    def test_non_positive_amount_is_ignored(self, engine):
        user = make_user(experience=10)

        assert engine.apply_experience(0, user) is None
        assert engine.apply_experience(-5, user) is None
        assert user["experience"] == 10

    def test_missing_user_is_ignored(self, engine):
        assert engine.apply_experience(100, None) is None

    def test_multi_level_jump(self, engine):
        user = make_user()

        event = engine.apply_experience(600, user)

        assert event.previous_level == 1
        assert event.new_level == 5
        assert event.rewards == ["레벨 5 보상: 첫 번째 모자 획득!"]

    def test_jump_lists_every_crossed_reward(self, engine):
        user = make_user(experience=2189, level=9)

        event = engine.apply_experience(3500, user)

        assert event.previous_level == 9
        assert event.new_level > 10
        assert event.rewards[0] == "레벨 10 보상: 특별 뱃지 획득!"

    def test_level_up_listeners(self, engine):
        listener = MagicMock()
        broken_listener = MagicMock(side_effect=RuntimeError("boom"))
        engine.add_level_up_listener(broken_listener)
        engine.add_level_up_listener(listener)

        event = engine.apply_experience(100, make_user())

        broken_listener.assert_called_once_with(event)
        listener.assert_called_once_with(event)


class TestLevelUpReward:
    """Test cosmetic level-up rewards"""

    def test_named_rewards(self):
        assert "특별 뱃지" in level_up_reward(10)
        assert "희귀 의상" in level_up_reward(20)
        assert "전설 아이템" in level_up_reward(50)

    def test_every_tenth_level(self):
        assert level_up_reward(30) == "레벨 30 보상: 특별 아이템 획득!"

    def test_no_reward(self):
        assert level_up_reward(7) is None

    def test_rewards_between_levels(self):
        assert level_up_rewards(9, 11) == ["레벨 10 보상: 특별 뱃지 획득!"]
        assert level_up_rewards(4, 20) == [
            "레벨 5 보상: 첫 번째 모자 획득!",
            "레벨 10 보상: 특별 뱃지 획득!",
            "레벨 20 보상: 희귀 의상 획득!",
        ]
        assert level_up_rewards(11, 12) == []


class TestAwardGame:
    """Test ProgressionEngine.award_game"""

    @pytest.fixture
    def ledger(self):
        return InMemoryDailyLedger()

    def test_victory_award_with_level_up(self, ledger):
        ledger.set_flag(LedgerKey.for_activity(DailyActivity.FIRST_GAME, TODAY, "u1"))
        store = InMemoryUserStore(make_user(experience=2550, level=10))
        engine = ProgressionEngine(ledger=ledger, user_store=store)
        session = play_session(EIGHT_WORD_CHAIN)

        award = engine.award_game(session, "u1", GameOutcome.VICTORY, TODAY)

        assert award.breakdown.total == 90
        assert award.level_up is not None
        assert award.level_up.new_level == 11
        assert award.persisted is True
        assert award.error is None

        saved = store.saved[-1]
        assert saved["experience"] == 2640
        assert saved["level"] == 11
        assert saved["total_games"] == 1
        assert saved["wins"] == 1
        assert saved["total_words"] == 4
        assert saved["current_streak"] == 1
        assert saved["longest_streak"] == 1

    def test_defeat_resets_streak(self, ledger):
        user = make_user()
        user["current_streak"] = 3
        user["longest_streak"] = 3
        store = InMemoryUserStore(user)
        engine = ProgressionEngine(ledger=ledger, user_store=store)

        engine.award_game(play_session(["사과", "과자"], winner="ai"), "u1", GameOutcome.DEFEAT, TODAY)

        assert user["current_streak"] == 0
        assert user["longest_streak"] == 3
        assert user["wins"] == 0

    def test_unknown_user_is_skipped(self, ledger):
        engine = ProgressionEngine(ledger=ledger, user_store=InMemoryUserStore())

        assert engine.award_game(play_session(["사과"]), "ghost", GameOutcome.VICTORY) is None

    def test_without_store(self):
        engine = ProgressionEngine()

        assert engine.award_game(play_session(["사과"]), "u1", GameOutcome.VICTORY) is None

    def test_first_game_bonus_only_once(self, ledger):
        store = InMemoryUserStore(make_user())
        engine = ProgressionEngine(ledger=ledger, user_store=store)
        session = play_session(["사과", "과자"])

        first = engine.award_game(session, "u1", GameOutcome.DEFEAT, TODAY)
        second = engine.award_game(session, "u1", GameOutcome.DEFEAT, TODAY)

        assert first.breakdown.bonus == 20
        assert second.breakdown.bonus == 0

    def test_fifth_game_of_the_day(self, ledger):
        store = InMemoryUserStore(make_user())
        engine = ProgressionEngine(ledger=ledger, user_store=store)
        session = play_session(["사과", "과자"])

        bonuses = [
            engine.award_game(session, "u1", GameOutcome.DEFEAT, TODAY).breakdown.bonus
            for _ in range(6)
        ]

        assert bonuses == [20, 0, 0, 0, 30, 0]

    def test_storage_failure_is_reported(self, ledger):
        store = MagicMock()
        store.get_user.return_value = make_user()
        store.put_user.side_effect = OSError("disk full")
        engine = ProgressionEngine(ledger=ledger, user_store=store)

        award = engine.award_game(play_session(["사과"]), "u1", GameOutcome.VICTORY, TODAY)

        assert award.persisted is False
        assert award.error.kind == "storage"
        assert award.breakdown.total > 0

    def test_storage_returning_false_is_reported(self, ledger):
        store = MagicMock()
        store.get_user.return_value = make_user()
        store.put_user.return_value = False
        engine = ProgressionEngine(ledger=ledger, user_store=store)

        award = engine.award_game(play_session(["사과"]), "u1", GameOutcome.VICTORY, TODAY)

        assert award.persisted is False

    def test_failed_save_keeps_daily_bonus_available(self, ledger):
        store = MagicMock()
        store.get_user.return_value = make_user()
        store.put_user.return_value = False
        engine = ProgressionEngine(ledger=ledger, user_store=store)
        session = play_session(["사과"])

        failed = engine.award_game(session, "u1", GameOutcome.VICTORY, TODAY)
        assert failed.breakdown.bonus == 20
        assert not ledger.has_flag(
            LedgerKey.for_activity(DailyActivity.FIRST_GAME, TODAY, "u1")
        )

        store.put_user.return_value = True
        retried = engine.award_game(session, "u1", GameOutcome.VICTORY, TODAY)

        assert retried.persisted is True
        assert retried.breakdown.bonus == 20
        assert ledger.has_flag(
            LedgerKey.for_activity(DailyActivity.FIRST_GAME, TODAY, "u1")
        )

class TestDailyActivity:
    """Test once-per-day activity rewards"""

    def test_reward_is_idempotent_per_day(self):
        engine = ProgressionEngine()
        user = make_user()

        assert engine.award_daily_activity(user, DailyActivity.DAILY_MISSION, TODAY) == 50
        assert engine.award_daily_activity(user, DailyActivity.DAILY_MISSION, TODAY) == 0
        assert user["experience"] == 50

        assert engine.award_daily_activity(
            user, DailyActivity.DAILY_MISSION, date(2024, 3, 2)
        ) == 50

    def test_rewards(self):
        assert DailyActivity.FIRST_GAME.experience_reward == 20
        assert DailyActivity.FIVE_GAMES.experience_reward == 30
        assert DailyActivity.DAILY_MISSION.experience_reward == 50
        assert DailyActivity.WEEKLY_RANKING.experience_reward == 100

    def test_missing_user(self):
        assert ProgressionEngine().award_daily_activity(None, DailyActivity.FIRST_GAME) == 0


class TestStatsAndHelpers:
    """Test read-only progression helpers"""

    @pytest.fixture
    def engine(self):
        return ProgressionEngine()

    def test_experience_stats(self, engine):
        stats = engine.get_experience_stats(make_user(experience=2300, level=10))

        assert stats.current_level == 10
        assert stats.experience_to_next_level == 340
        assert stats.level_progress == pytest.approx(0.244, abs=1e-3)
        assert stats.total_experience_needed == 2640
        assert stats.level_title == "초보자"
        assert not stats.is_max_level

    def test_user_level_helpers(self, engine):
        user = make_user(experience=2300, level=10)

        assert engine.experience_to_next_level(user) == 340
        assert engine.level_progress(user) == pytest.approx(0.244, abs=1e-3)

    def test_simulate_experience(self, engine):
        simulation = engine.simulate_experience(2550, 90)

        assert simulation.before_level == 10
        assert simulation.after_level == 11
        assert simulation.will_level_up
        assert simulation.total_experience == 2640
        assert not engine.simulate_experience(0, 50).will_level_up

    def test_boosters(self, engine):
        assert engine.apply_booster(ExperienceBooster.SMALL, 100) == 120
        assert engine.apply_booster(ExperienceBooster.MEDIUM, 100) == 150
        assert engine.apply_booster(ExperienceBooster.LARGE, 100) == 200
        assert engine.apply_multiplier(1.5, 9) == 13

    def test_today_uses_timezone(self):
        engine = ProgressionEngine(timezone="Asia/Seoul")
        assert isinstance(engine.today(), date)

    def test_calculator_shares_the_engine_timezone(self):
        engine = ProgressionEngine(timezone="Pacific/Kiritimati")

        assert engine.calculator.today() == engine.today()
        assert engine.today() != ProgressionEngine(timezone="Pacific/Pago_Pago").today()
