"""
Word value types for the Word Chain League
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class WordDifficulty(Enum):
    """Difficulty tier derived from word length"""

    BASIC = "기본"
    MEDIUM = "중급"
    LONG = "고급"

    @classmethod
    def from_length(cls, length: int) -> "WordDifficulty":
        """Classify a word length into a difficulty tier"""
        if length <= 3:
            return cls.BASIC
        if length <= 5:
            return cls.MEDIUM
        return cls.LONG

    @property
    def experience_points(self) -> int:
        return {
            WordDifficulty.BASIC: 5,
            WordDifficulty.MEDIUM: 8,
            WordDifficulty.LONG: 12,
        }[self]


@dataclass(frozen=True)
class Word:
    """A dictionary word; two words with the same text are the same word"""

    text: str

    @property
    def first_char(self) -> str:
        return self.text[:1]

    @property
    def last_char(self) -> str:
        return self.text[-1:]

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def difficulty(self) -> WordDifficulty:
        return WordDifficulty.from_length(self.length)

    @property
    def experience_points(self) -> int:
        return self.difficulty.experience_points

    def is_valid_next(self, previous: "Word") -> bool:
        """Check the chain-link rule against the previously played word"""
        return previous.last_char == self.first_char

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class GameWord:
    """A word played in a session by a specific player"""

    word: Word
    player_id: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def text(self) -> str:
        return self.word.text
