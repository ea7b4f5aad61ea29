"""
Tests for AI word selection
"""

import random

import pytest

from wordchain.core.game.ai_player import (
    AI_PLAYER_ID,
    OPENING_CHARS,
    AIPlayer,
    parse_difficulty,
)
from wordchain.core.game.session import GameMode, GameSession
from wordchain.dictionary import AIDifficulty, WordDictionary


class TestAIPlayer:
    """Test AIPlayer class"""

    @pytest.fixture
    def dictionary(self):
        return WordDictionary(rng=random.Random(3))

    def _session(self, dictionary, first_player="u1"):
        players = [first_player, AI_PLAYER_ID] if first_player == "u1" else [AI_PLAYER_ID, "u1"]
        session = GameSession(GameMode.AI_PLAYER, players, dictionary)
        session.start()
        return session

    def test_continues_the_chain(self, dictionary):
        ai = AIPlayer(dictionary)
        session = self._session(dictionary)
        session.submit_word("사과", "u1")

        assert ai.choose_word(session) == "과자"

    def test_never_repeats_used_words(self, dictionary):
        ai = AIPlayer(dictionary, AIDifficulty.HARD)
        session = self._session(dictionary)
        session.submit_word("수영", "u1")
        session.submit_word("영화", AI_PLAYER_ID)
        session.submit_word("화산", "u1")

        word = ai.choose_word(session)

        assert word is not None
        assert word.startswith("산")
        assert word not in session.used_words

    def test_stuck_returns_none(self, dictionary):
        ai = AIPlayer(dictionary)
        session = self._session(dictionary)
        session.submit_word("움직임", "u1")

        assert ai.choose_word(session) is None

    def test_opening_move_uses_opening_characters(self, dictionary):
        ai = AIPlayer(dictionary, AIDifficulty.EASY, rng=random.Random(5))
        session = self._session(dictionary, first_player=AI_PLAYER_ID)

        word = ai.choose_word(session)

        assert word is not None
        assert word[0] in OPENING_CHARS
        assert session.check_word(word, AI_PLAYER_ID).is_valid

    def test_chosen_word_is_always_playable(self, dictionary):
        ai = AIPlayer(dictionary, AIDifficulty.MEDIUM, rng=random.Random(11))
        session = self._session(dictionary, first_player=AI_PLAYER_ID)

        # AI plays against itself through both seats until it gets stuck
        for _ in range(30):
            word = ai.choose_word(session)
            if word is None:
                break
            assert session.submit_word(word, session.current_player)

        texts = [word.text for word in session.words]
        assert len(texts) == len(set(texts))


class TestParseDifficulty:
    """Test difficulty parsing"""

    def test_defaults_to_medium(self):
        assert parse_difficulty(None) is AIDifficulty.MEDIUM

    def test_names(self):
        assert parse_difficulty("easy") is AIDifficulty.EASY
        assert parse_difficulty(" HARD ") is AIDifficulty.HARD
        assert parse_difficulty(AIDifficulty.MEDIUM) is AIDifficulty.MEDIUM

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_difficulty("nightmare")
