"""
Tests for word value types
"""

from wordchain.words import GameWord, Word, WordDifficulty


class TestWord:
    """Test Word value type"""

    def test_derived_characters(self):
        word = Word("사과")

        assert word.first_char == "사"
        assert word.last_char == "과"
        assert word.length == 2

    def test_difficulty_by_length(self):
        assert Word("사과").difficulty is WordDifficulty.BASIC
        assert Word("부침개").difficulty is WordDifficulty.BASIC
        assert Word("이구아나").difficulty is WordDifficulty.MEDIUM
        assert Word("류머티즘").difficulty is WordDifficulty.MEDIUM
        assert Word("가나다라마바").difficulty is WordDifficulty.LONG

    def test_experience_points(self):
        assert Word("사과").experience_points == 5
        assert Word("이구아나").experience_points == 8
        assert Word("가나다라마바").experience_points == 12

    def test_difficulty_display_names(self):
        assert WordDifficulty.BASIC.value == "기본"
        assert WordDifficulty.MEDIUM.value == "중급"
        assert WordDifficulty.LONG.value == "고급"

    def test_equality_by_text(self):
        assert Word("사과") == Word("사과")
        assert len({Word("사과"), Word("사과"), Word("과자")}) == 2

    def test_chain_link_rule(self):
        assert Word("과자").is_valid_next(Word("사과"))
        assert not Word("자두").is_valid_next(Word("사과"))


class TestGameWord:
    """Test GameWord"""

    def test_game_word_binds_player(self):
        game_word = GameWord(word=Word("사과"), player_id="u1")

        assert game_word.text == "사과"
        assert game_word.player_id == "u1"
        assert game_word.timestamp is not None
