"""
AI opponent word selection
"""

import logging
import random

from ...dictionary import AIDifficulty, WordDictionary
from .session import GameSession

logger = logging.getLogger(__name__)

AI_PLAYER_ID = "ai"

# Opening characters used when the AI plays the first word of a game
OPENING_CHARS = ["가", "나", "다", "라", "마", "바", "사"]


class AIPlayer:
    """Chooses the AI's next word from the dictionary"""

    def __init__(
        self,
        dictionary: WordDictionary,
        difficulty: AIDifficulty = AIDifficulty.MEDIUM,
        player_id: str = AI_PLAYER_ID,
        rng: random.Random | None = None,
    ):
        self.dictionary = dictionary
        self.difficulty = difficulty
        self.player_id = player_id
        self._rng = rng or random.Random()

    def choose_word(self, session: GameSession) -> str | None:
        """
        Pick a playable word for the current state of the session

        Args:
            session: Session whose turn the AI is about to play

        Returns:
            A dictionary word that continues the chain, or None when the AI is stuck
        """
        used_words = session.used_words
        required_char = session.required_char

        if required_char is not None:
            return self.dictionary.get_strategic_word(
                required_char, self.difficulty, excluding=used_words
            )

        # Opening move: try the opening characters in random order
        opening_chars = list(OPENING_CHARS)
        self._rng.shuffle(opening_chars)
        for char in opening_chars:
            word = self.dictionary.get_strategic_word(
                char, self.difficulty, excluding=used_words
            )
            if word:
                return word

        logger.warning("AI could not find an opening word")
        return None


def parse_difficulty(value: str | AIDifficulty | None) -> AIDifficulty:
    """Parse a difficulty name such as 'easy' into an AIDifficulty"""
    if value is None:
        return AIDifficulty.MEDIUM
    if isinstance(value, AIDifficulty):
        return value
    try:
        return AIDifficulty(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown AI difficulty: {value}") from None
