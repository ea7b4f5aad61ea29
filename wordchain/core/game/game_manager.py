"""
Game manager: drives a session through turns, timeouts, AI moves and awards
"""

import asyncio
import contextlib
import inspect
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from ...config import Settings, get_settings
from ...dictionary import AIDifficulty, WordDictionary
from ..progression.engine import ExperienceAward, LevelUpEvent, ProgressionEngine
from ..progression.experience import CloseDefeatRule, GameOutcome, build_close_defeat_rule
from .ai_player import AIPlayer, parse_difficulty
from .session import (
    GameEndReason,
    GameMode,
    GameSession,
    GameStatus,
    RejectionReason,
    WordValidation,
)
from .turn_timer import TurnTimer

logger = logging.getLogger(__name__)

AI_FAILED_MESSAGE = "AI가 단어를 찾지 못했습니다"


@dataclass
class GameResult:
    """Outward notification that a session has finished"""

    session: GameSession
    winner: str | None
    reason: GameEndReason | None
    awards: dict[str, ExperienceAward] = field(default_factory=dict)

    @property
    def level_ups(self) -> list[LevelUpEvent]:
        return [award.level_up for award in self.awards.values() if award.level_up]

    @property
    def message(self) -> str:
        if self.reason is GameEndReason.AI_FAILED:
            return AI_FAILED_MESSAGE
        if self.reason is GameEndReason.TIME_UP:
            return "시간 초과!"
        if self.reason is GameEndReason.FORFEIT:
            return "게임을 포기했습니다."
        return "게임이 종료되었습니다."


def classify_outcome(
    session: GameSession,
    player_id: str,
    loser_id: str | None,
    close_defeat_rule: CloseDefeatRule | None = None,
) -> GameOutcome:
    """Classify how a finished game ended for one player"""
    if session.winner == player_id:
        return GameOutcome.VICTORY
    if session.end_reason is GameEndReason.FORFEIT and player_id == loser_id:
        return GameOutcome.FORFEIT
    if close_defeat_rule is not None and close_defeat_rule(session, player_id):
        return GameOutcome.CLOSE_DEFEAT
    return GameOutcome.DEFEAT


class GameManager:
    """Owns the current session, its turn timer and any pending AI move"""

    def __init__(
        self,
        dictionary: WordDictionary,
        progression: ProgressionEngine | None = None,
        settings: Settings | None = None,
        close_defeat_rule: CloseDefeatRule | None = None,
    ):
        self.settings = settings or get_settings()
        self.dictionary = dictionary
        self.progression = progression
        self.close_defeat_rule = close_defeat_rule or build_close_defeat_rule(
            self.settings.close_defeat_rule, self.settings.close_defeat_min_words
        )
        self.ai_player = AIPlayer(dictionary, parse_difficulty(self.settings.ai_difficulty))

        self.current_session: GameSession | None = None
        self.last_result: GameResult | None = None
        self._timer: TurnTimer | None = None
        self._ai_task: asyncio.Task | None = None
        self._generation = 0

        self._game_end_listeners: list[Callable] = []
        self._ai_move_listeners: list[Callable] = []

    def add_game_end_listener(self, listener: Callable):
        """Register a sync or async callable receiving GameResult"""
        self._game_end_listeners.append(listener)

    def add_ai_move_listener(self, listener: Callable):
        """Register a sync or async callable receiving (session, word)"""
        self._ai_move_listeners.append(listener)

    @property
    def is_game_active(self) -> bool:
        return (
            self.current_session is not None
            and self.current_session.status is GameStatus.PLAYING
        )

    @property
    def is_ai_thinking(self) -> bool:
        return self._ai_task is not None and not self._ai_task.done()

    @property
    def time_remaining(self) -> float:
        return self._timer.time_remaining if self._timer else 0.0

    async def start_game(
        self,
        mode: GameMode,
        players: list[str],
        time_limit: float | None = None,
    ) -> GameSession:
        """Replace any current game with a freshly started session"""
        await self._cancel_pending()
        if self.current_session and not self.current_session.status.is_terminal:
            self.current_session.cancel()

        session = GameSession(
            game_mode=mode,
            players=players,
            dictionary=self.dictionary,
            time_limit=time_limit or self.settings.turn_time_limit,
        )
        self._generation += 1
        self.current_session = session
        self.last_result = None
        session.start()

        generation = self._generation
        self._timer = TurnTimer(
            session.time_limit,
            on_expire=lambda: self._handle_time_up(generation),
            tick_interval=self.settings.timer_tick_interval,
        )
        await self._timer.start()

        logger.info(f"Game started: {mode.display_name}, players: {len(players)}")

        if self._is_ai_turn(session):
            self._schedule_ai_move(session)
        return session

    async def start_ai_game(
        self,
        human_id: str,
        difficulty: str | AIDifficulty | None = None,
        time_limit: float | None = None,
    ) -> GameSession:
        """Start a game between one human and the AI; the human moves first"""
        if difficulty is not None:
            self.ai_player.difficulty = parse_difficulty(difficulty)
        return await self.start_game(
            GameMode.AI_PLAYER, [human_id, self.ai_player.player_id], time_limit
        )

    async def submit_word(self, text: str, player_id: str | None = None) -> WordValidation:
        """
        Submit a word for a player (defaults to the current player)

        Returns:
            WordValidation describing acceptance or the rejection reason
        """
        session = self.current_session
        if session is None:
            return WordValidation(RejectionReason.GAME_NOT_ACTIVE)

        word = text.strip()
        player = player_id if player_id is not None else session.current_player
        if self.is_ai_thinking:
            return WordValidation(RejectionReason.WRONG_TURN)

        validation = session.check_word(word, player)
        if not validation.is_valid:
            logger.info(f"Word rejected: {word} by {player} - {validation.reason.value}")
            return validation

        session.submit_word(word, player)
        if self._timer:
            self._timer.reset()
        logger.info(f"Word accepted: {word} by {player}")

        if self._is_ai_turn(session):
            self._schedule_ai_move(session)
        return validation

    async def forfeit(self, player_id: str | None = None) -> GameResult | None:
        """The current player gives up; the next distinct player wins"""
        session = self.current_session
        if session is None or session.status is not GameStatus.PLAYING:
            return None
        if player_id is not None and player_id != session.current_player:
            logger.warning(f"Forfeit ignored: {player_id} is not the current player")
            return None

        return await self.end_game(
            winner=session.next_distinct_player(),
            reason=GameEndReason.FORFEIT,
            loser=session.current_player,
        )

    async def end_game(
        self,
        winner: str | None = None,
        reason: GameEndReason = GameEndReason.MANUAL,
        loser: str | None = None,
    ) -> GameResult | None:
        """Finish the current session, award experience and notify listeners"""
        session = self.current_session
        if session is None or session.status.is_terminal:
            return None

        await self._cancel_pending()
        session.end_game(winner=winner, reason=reason)

        result = GameResult(session=session, winner=winner, reason=reason)
        result.awards = self._award_players(session, loser)
        self.last_result = result

        logger.info(f"Game over: {reason.value}, winner: {winner or '없음'}")
        await self._emit(self._game_end_listeners, result)
        return result

    async def cancel_game(self) -> bool:
        """Abandon the current session without awarding anything"""
        session = self.current_session
        if session is None:
            return False
        await self._cancel_pending()
        return session.cancel()

    async def shutdown(self):
        """Stop background work; used when the owning handler goes away"""
        await self._cancel_pending()

    def _is_ai_turn(self, session: GameSession) -> bool:
        return (
            session.game_mode is GameMode.AI_PLAYER
            and session.status is GameStatus.PLAYING
            and session.current_player == self.ai_player.player_id
        )

    def _schedule_ai_move(self, session: GameSession):
        generation = self._generation
        expected_turn = len(session.words)
        self._ai_task = asyncio.create_task(
            self._perform_ai_move(session, generation, expected_turn)
        )

    async def _perform_ai_move(
        self, session: GameSession, generation: int, expected_turn: int
    ):
        """Think for a while, then play exactly one word if the turn is still ours"""
        delay = random.uniform(
            self.settings.ai_min_delay,
            max(self.settings.ai_min_delay, self.settings.ai_max_delay),
        )
        await asyncio.sleep(delay)

        if not self._is_current(session, generation) or len(session.words) != expected_turn:
            logger.debug(f"Stale AI move for session {session.session_id} ignored")
            return

        ai_id = session.current_player
        word = self.ai_player.choose_word(session)
        if word is None or not session.submit_word(word, ai_id):
            logger.info(f"AI could not continue after {len(session.words)} words")
            await self.end_game(
                winner=session.next_distinct_player(),
                reason=GameEndReason.AI_FAILED,
                loser=ai_id,
            )
            return

        if self._timer:
            self._timer.reset()
        logger.info(f"🤖 AI word: {word}")
        await self._emit(self._ai_move_listeners, session, word)

    async def _handle_time_up(self, generation: int):
        session = self.current_session
        if session is None or not self._is_current(session, generation):
            logger.debug("Stale turn timer expiry ignored")
            return

        await self.end_game(
            winner=session.next_distinct_player(),
            reason=GameEndReason.TIME_UP,
            loser=session.current_player,
        )

    def _is_current(self, session: GameSession, generation: int) -> bool:
        return (
            session is self.current_session
            and generation == self._generation
            and session.status is GameStatus.PLAYING
        )

    def _award_players(
        self, session: GameSession, loser: str | None
    ) -> dict[str, ExperienceAward]:
        awards: dict[str, ExperienceAward] = {}
        if self.progression is None:
            return awards

        for player_id in dict.fromkeys(session.players):
            if session.game_mode is GameMode.AI_PLAYER and player_id == self.ai_player.player_id:
                continue
            outcome = classify_outcome(session, player_id, loser, self.close_defeat_rule)
            award = self.progression.award_game(session, player_id, outcome)
            if award is not None:
                awards[player_id] = award
        return awards

    async def _cancel_pending(self):
        """Stop the turn timer and any pending AI move of the current generation"""
        if self._timer:
            await self._timer.stop()

        task = self._ai_task
        self._ai_task = None
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _emit(self, listeners: list[Callable], *args):
        for listener in listeners:
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Game listener failed: {e}", exc_info=True)

