"""
Korean word dictionary with first/last character indices
"""

import json
import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .config import get_settings

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 2

DEFAULT_WORDS = [
    # 음식
    "사과", "과자", "자두", "두부", "부침개", "개구리", "리본", "본체",
    "체리", "리듬", "듬직", "직장", "장미", "미역", "역사", "사람",
    "람보", "보리", "리스", "스위치", "치킨", "킨더", "더위", "위험",
    # 동물
    "고양이", "이구아나", "나비", "비둘기", "기린", "린스", "스님", "님프",
    "프라이팬", "팬더", "더치", "치타", "타조", "조개", "개미", "미끄럼틀",
    "틀니", "니켈", "켈프", "프로그램", "램프", "프린터", "터키", "키위",
    # 일상용품
    "연필", "필통", "통장", "장갑", "갑옷", "옷장", "장난감", "감자",
    "자석", "석유", "유리", "리모컨", "컨테이너", "너구리", "본드",
    "드라이버", "버스", "스마트폰", "폰카", "카메라", "라면", "면도기", "기타",
    # 자연
    "나무", "무지개", "개울", "울음", "음성", "성산", "산소", "소나무",
    "무궁화", "화산", "산업", "업무", "무역", "역할", "할머니", "니트",
    "트럭", "럭키", "키노", "노을", "을지로", "로봇", "봇물", "물고기",
    # 기타
    "가위", "위로", "로또", "또래", "래퍼", "퍼즐", "즐거움", "움직임",
    "김치", "치즈", "즈음", "음료", "료리", "리터", "터널", "널빤지",
    "지갑", "갑자기", "기차", "차례", "례의", "의사", "사진", "진주",
    "주스", "스타", "타이어", "어린이", "이름", "름차순", "순간", "간식",
    "식당", "당근", "근육", "육류", "류머티즘", "즘새", "새벽", "벽돌",
    "돌멩이", "이야기", "기분", "분수", "수박", "박수", "수영", "영화",
]

# Ending characters used to bias AI word choice for the next player
EASY_END_CHARS = frozenset(["이", "가", "다", "리", "기", "미", "사", "자"])
MEDIUM_END_CHARS = frozenset(["음", "름", "은", "을", "업", "입", "옵"])
HARD_END_CHARS = frozenset(["늠", "읽", "닦", "곡", "욕", "틈", "흠"])
HARD_FOLLOWUP_LIMIT = 3
HARD_MIN_LENGTH = 4


class AIDifficulty(Enum):
    """AI opponent strength"""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def display_name(self) -> str:
        return {
            AIDifficulty.EASY: "쉬움",
            AIDifficulty.MEDIUM: "보통",
            AIDifficulty.HARD: "어려움",
        }[self]


@dataclass
class DictionaryStats:
    """Dictionary statistics"""

    total_words: int
    unique_first_chars: int
    unique_last_chars: int
    average_word_length: float
    is_loaded: bool


def is_korean_char(char: str) -> bool:
    """Check whether a character is Hangul (syllable, jamo or compatibility jamo)"""
    code = ord(char)
    return (
        0xAC00 <= code <= 0xD7AF
        or 0x1100 <= code <= 0x11FF
        or 0x3130 <= code <= 0x318F
    )


def is_korean_word(text: str) -> bool:
    return bool(text) and all(is_korean_char(char) for char in text)


def is_acceptable_word(text: str) -> bool:
    """Words shorter than two characters or with non-Hangul characters are rejected"""
    return len(text) >= MIN_WORD_LENGTH and is_korean_word(text)


class WordDictionary:
    """In-memory word corpus indexed by first and last character"""

    def __init__(
        self,
        extra_words: Iterable[str] | None = None,
        words_file: str | None = None,
        rng: random.Random | None = None,
    ):
        self._rng = rng or random.Random()
        self._words: set[str] = set()
        self._by_first_char: dict[str, list[str]] = {}
        self._by_last_char: dict[str, list[str]] = {}
        self.is_loaded = False
        self._load(extra_words, words_file)

    def _load(self, extra_words: Iterable[str] | None, words_file: str | None):
        """Load the baseline corpus, merge external words and build indices"""
        self._words = set(DEFAULT_WORDS)

        if words_file:
            self._merge_words(self._read_words_file(words_file))
        if extra_words is not None:
            self._merge_words(extra_words)

        self._build_indices()
        self.is_loaded = True
        logger.info(f"Dictionary loaded: {len(self._words)} words")

    def _read_words_file(self, path: str) -> list[str]:
        """Read a JSON array of words; an unreadable file is logged and skipped"""
        try:
            with open(Path(path), encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load words file {path}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Words file {path} must contain a JSON array")
            return []
        return [item for item in data if isinstance(item, str)]

    def _merge_words(self, words: Iterable[str]) -> None:
        dropped = 0
        for word in words:
            clean_word = word.strip()
            if is_acceptable_word(clean_word):
                self._words.add(clean_word)
            else:
                dropped += 1
        if dropped:
            logger.debug(f"Dropped {dropped} invalid words from external word list")

    def _build_indices(self) -> None:
        self._by_first_char = {}
        self._by_last_char = {}

        for word in self._words:
            self._by_first_char.setdefault(word[0], []).append(word)
            self._by_last_char.setdefault(word[-1], []).append(word)

        for bucket in self._by_first_char.values():
            bucket.sort()
        for bucket in self._by_last_char.values():
            bucket.sort()

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    def contains(self, word: str) -> bool:
        """Check whether a word is in the dictionary"""
        return word.strip() in self._words

    def words_starting_with(self, first_char: str) -> list[str]:
        return list(self._by_first_char.get(first_char, []))

    def words_ending_with(self, last_char: str) -> list[str]:
        return list(self._by_last_char.get(last_char, []))

    def count(self, first_char: str) -> int:
        """Number of words starting with a character"""
        return len(self._by_first_char.get(first_char, []))

    def random_word(
        self, first_char: str, excluding: set[str] | None = None
    ) -> str | None:
        """Pick a random word starting with a character, skipping excluded words"""
        candidates = self._available(first_char, excluding)
        return self._rng.choice(candidates) if candidates else None

    def get_strategic_word(
        self,
        first_char: str,
        difficulty: AIDifficulty,
        excluding: set[str] | None = None,
    ) -> str | None:
        """Pick a word whose ending is biased by difficulty for the next player"""
        candidates = self._available(first_char, excluding)
        if not candidates:
            return None

        if difficulty is AIDifficulty.EASY:
            preferred = [w for w in candidates if w[-1] in EASY_END_CHARS]
        elif difficulty is AIDifficulty.MEDIUM:
            preferred = [w for w in candidates if w[-1] in MEDIUM_END_CHARS]
        elif difficulty is AIDifficulty.HARD:
            preferred = [
                w
                for w in candidates
                if w[-1] in HARD_END_CHARS or self.count(w[-1]) <= HARD_FOLLOWUP_LIMIT
            ]
            if not preferred:
                preferred = [w for w in candidates if len(w) >= HARD_MIN_LENGTH]
        else:
            raise ValueError(f"Unknown AI difficulty: {difficulty}")

        return self._rng.choice(preferred or candidates)

    def add_custom_word(self, word: str) -> bool:
        """Add a user-supplied word; duplicates and invalid words are rejected"""
        clean_word = word.strip()
        if not is_acceptable_word(clean_word) or clean_word in self._words:
            return False

        self._words.add(clean_word)
        first_bucket = self._by_first_char.setdefault(clean_word[0], [])
        first_bucket.append(clean_word)
        first_bucket.sort()
        last_bucket = self._by_last_char.setdefault(clean_word[-1], [])
        last_bucket.append(clean_word)
        last_bucket.sort()

        logger.info(f"Custom word added: {clean_word}")
        return True

    def search_words(self, query: str, limit: int = 50) -> list[str]:
        if not query:
            return []
        return sorted(word for word in self._words if query in word)[:limit]

    def get_hint(
        self, first_char: str, excluding: set[str] | None = None
    ) -> str | None:
        """First two characters of a random playable word"""
        word = self.random_word(first_char, excluding)
        if word is None:
            return None
        return word[:2] + "..."

    def get_stats(self) -> DictionaryStats:
        total_length = sum(len(word) for word in self._words)
        return DictionaryStats(
            total_words=len(self._words),
            unique_first_chars=len(self._by_first_char),
            unique_last_chars=len(self._by_last_char),
            average_word_length=total_length / len(self._words) if self._words else 0.0,
            is_loaded=self.is_loaded,
        )

    def _available(self, first_char: str, excluding: set[str] | None) -> list[str]:
        words = self._by_first_char.get(first_char, [])
        if not excluding:
            return list(words)
        return [word for word in words if word not in excluding]


# Global instance
_dictionary = None


def get_dictionary() -> WordDictionary:
    """Get global dictionary instance"""
    global _dictionary
    if _dictionary is None:
        _dictionary = WordDictionary(words_file=get_settings().words_file)
    return _dictionary
