"""
Game session state machine for the Word Chain League
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ...dictionary import MIN_WORD_LENGTH, WordDictionary, is_korean_word
from ...words import GameWord, Word

logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT = 15.0


class GameMode(Enum):
    """Available game modes"""

    SINGLE_PLAYER = "single"
    MULTI_PLAYER = "multi"
    AI_PLAYER = "ai"

    @property
    def display_name(self) -> str:
        return {
            GameMode.SINGLE_PLAYER: "혼자하기",
            GameMode.MULTI_PLAYER: "멀티플레이",
            GameMode.AI_PLAYER: "AI 대전",
        }[self]


class GameStatus(Enum):
    """Session lifecycle; finished and cancelled are terminal"""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.FINISHED, GameStatus.CANCELLED)


class GameEndReason(Enum):
    """Why a session ended"""

    TIME_UP = "time_up"
    FORFEIT = "forfeit"
    AI_FAILED = "ai_failed"
    MANUAL = "manual"


class RejectionReason(Enum):
    """Why a submitted word was refused"""

    GAME_NOT_ACTIVE = "game_not_active"
    WRONG_TURN = "wrong_turn"
    TOO_SHORT = "too_short"
    INVALID_CHARACTERS = "invalid_characters"
    NOT_IN_DICTIONARY = "not_in_dictionary"
    ALREADY_USED = "already_used"
    CHAIN_BROKEN = "chain_broken"


REJECTION_MESSAGES = {
    RejectionReason.GAME_NOT_ACTIVE: "진행 중인 게임이 없습니다.",
    RejectionReason.WRONG_TURN: "지금은 당신의 차례가 아닙니다.",
    RejectionReason.TOO_SHORT: "2글자 이상 입력해주세요.",
    RejectionReason.INVALID_CHARACTERS: "한글만 입력 가능합니다.",
    RejectionReason.NOT_IN_DICTIONARY: "사전에 없는 단어입니다.",
    RejectionReason.ALREADY_USED: "이미 사용된 단어입니다.",
}


@dataclass(frozen=True)
class WordValidation:
    """Outcome of checking a word; `reason` is None when the word is accepted"""

    reason: RejectionReason | None = None
    required_char: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        """User-facing description of the result"""
        if self.reason is None:
            return ""
        if self.reason is RejectionReason.CHAIN_BROKEN:
            return f"'{self.required_char}'로 시작하는 단어를 입력하세요."
        return REJECTION_MESSAGES[self.reason]


VALID = WordValidation()


class GameSession:
    """A single word chain game between a fixed roster of players"""

    def __init__(
        self,
        game_mode: GameMode,
        players: list[str],
        dictionary: WordDictionary,
        time_limit: float = DEFAULT_TIME_LIMIT,
    ):
        if not players:
            raise ValueError("A game session needs at least one player")

        self.session_id = str(uuid.uuid4())
        self.game_mode = game_mode
        self.players = tuple(players)
        self.dictionary = dictionary
        self.time_limit = time_limit
        self.current_player_index = 0
        self.words: list[GameWord] = []
        self.status = GameStatus.WAITING
        self.start_time = datetime.now()
        self.end_time: datetime | None = None
        self.winner: str | None = None
        self.end_reason: GameEndReason | None = None

    @property
    def current_player(self) -> str:
        return self.players[self.current_player_index]

    @property
    def last_word(self) -> GameWord | None:
        return self.words[-1] if self.words else None

    @property
    def required_char(self) -> str | None:
        """Character the next word must start with, if any"""
        last_word = self.last_word
        return last_word.word.last_char if last_word else None

    @property
    def used_words(self) -> set[str]:
        return {game_word.text for game_word in self.words}

    @property
    def duration(self) -> float:
        """Elapsed seconds since the game started"""
        return ((self.end_time or datetime.now()) - self.start_time).total_seconds()

    def words_by(self, player_id: str) -> list[GameWord]:
        return [game_word for game_word in self.words if game_word.player_id == player_id]

    def start(self) -> bool:
        """Move from waiting to playing"""
        if self.status is not GameStatus.WAITING:
            logger.warning(
                f"Cannot start session {self.session_id} from status {self.status.value}"
            )
            return False

        self.status = GameStatus.PLAYING
        self.start_time = datetime.now()
        logger.info(
            f"Session {self.session_id} started: mode={self.game_mode.value}, "
            f"players={list(self.players)}"
        )
        return True

    def check_word(self, text: str, player_id: str) -> WordValidation:
        """Validate a candidate word without changing the session"""
        if self.status is not GameStatus.PLAYING:
            return WordValidation(RejectionReason.GAME_NOT_ACTIVE)
        if player_id != self.current_player:
            return WordValidation(RejectionReason.WRONG_TURN)
        if len(text) < MIN_WORD_LENGTH:
            return WordValidation(RejectionReason.TOO_SHORT)
        if not is_korean_word(text):
            return WordValidation(RejectionReason.INVALID_CHARACTERS)
        if not self.dictionary.contains(text):
            return WordValidation(RejectionReason.NOT_IN_DICTIONARY)
        if text in self.used_words:
            return WordValidation(RejectionReason.ALREADY_USED)

        last_word = self.last_word
        if last_word and not Word(text).is_valid_next(last_word.word):
            return WordValidation(
                RejectionReason.CHAIN_BROKEN, required_char=last_word.word.last_char
            )

        return VALID

    def submit_word(self, text: str, player_id: str) -> bool:
        """Append a word for the current player and pass the turn"""
        if not self.check_word(text, player_id).is_valid:
            return False

        self.words.append(GameWord(word=Word(text), player_id=player_id))
        self.next_turn()
        return True

    def next_turn(self) -> None:
        self.current_player_index = (self.current_player_index + 1) % len(self.players)

    def next_distinct_player(self) -> str | None:
        """First player after the current one in roster order with a different id"""
        current = self.current_player
        count = len(self.players)
        for offset in range(1, count):
            candidate = self.players[(self.current_player_index + offset) % count]
            if candidate != current:
                return candidate
        return None

    def end_game(
        self, winner: str | None = None, reason: GameEndReason | None = None
    ) -> bool:
        """Finish the session from waiting or playing"""
        if self.status.is_terminal:
            return False

        self.status = GameStatus.FINISHED
        self.end_time = datetime.now()
        self.winner = winner
        self.end_reason = reason
        logger.info(
            f"Session {self.session_id} finished: winner={winner}, "
            f"reason={reason.value if reason else None}, words={len(self.words)}"
        )
        return True

    def cancel(self) -> bool:
        """Abandon the session without a result"""
        if self.status.is_terminal:
            return False

        self.status = GameStatus.CANCELLED
        self.end_time = datetime.now()
        logger.info(f"Session {self.session_id} cancelled")
        return True
