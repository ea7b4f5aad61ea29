"""
Command handlers for the Word Chain League bot
"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from ...dictionary import WordDictionary
from ...utils import escape_html, format_user_stats
from ..database.database_manager import DatabaseManager
from ..game.ai_player import parse_difficulty
from ..progression.engine import ProgressionEngine

logger = logging.getLogger(__name__)

NO_GAME_MESSAGE = "🎮 진행 중인 게임이 없습니다. /play 로 게임을 시작하세요."


class CommandHandlers:
    """Handles all bot commands"""

    def __init__(
        self,
        db_manager: DatabaseManager,
        dictionary: WordDictionary,
        progression: ProgressionEngine,
        safe_reply_callback,
        get_game_manager_callback,
        find_game_manager_callback,
    ):
        self.db_manager = db_manager
        self.dictionary = dictionary
        self.progression = progression
        self._safe_reply = safe_reply_callback
        self._get_game_manager = get_game_manager_callback
        self._find_game_manager = find_game_manager_callback

    def _register(self, update: Update):
        user = update.effective_user
        return self.db_manager.get_or_create_user(str(user.id), user.first_name or "플레이어")

    async def start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start command"""
        if not update.effective_user:
            return

        user = update.effective_user
        self._register(update)

        welcome_message = f"""🎉 안녕하세요, {escape_html(user.first_name or '')}님!

<b>끝말잇기 리그</b>에 오신 것을 환영합니다! 🔗

앞 단어의 마지막 글자로 시작하는 단어를 이어가세요.
게임을 마칠 때마다 경험치를 얻고 레벨이 올라갑니다.

📚 <b>주요 명령어:</b>
/play - AI와 게임 시작
/stats - 내 기록 보기
/help - 자세한 도움말"""

        await self._safe_reply(update, welcome_message, parse_mode="HTML")

    async def help_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /help command"""
        if not update.effective_user:
            return
        help_message = """📖 끝말잇기 리그 도움말

🎮 <b>게임:</b>
/play - AI와 게임 시작 (보통 난이도)
/play easy|medium|hard - 난이도를 골라 시작
/forfeit - 게임 포기
/hint - 다음 단어 힌트

📝 <b>규칙:</b>
• 두 글자 이상의 한글 단어만 사용할 수 있습니다
• 사전에 있는 단어여야 합니다
• 이미 나온 단어는 다시 쓸 수 없습니다
• 제한 시간 안에 입력하지 못하면 패배합니다

⭐ <b>경험치:</b>
완주 +20, 승리 +50, 단어 길이에 따라 +5/+8/+12
오늘의 첫 게임, 5게임 달성, 긴 게임, 완벽한 게임 보너스

📊 /stats - 레벨과 전적 보기"""

        await self._safe_reply(update, help_message, parse_mode="HTML")

    async def play_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /play [easy|medium|hard] command"""
        if not update.effective_user:
            return

        difficulty = None
        if context.args:
            try:
                difficulty = parse_difficulty(context.args[0])
            except ValueError:
                await self._safe_reply(
                    update,
                    "❌ 난이도는 easy, medium, hard 중 하나입니다.\n예: /play hard",
                )
                return

        if self._register(update) is None:
            await self._safe_reply(update, "❌ 사용자 등록에 실패했습니다. 잠시 후 다시 시도하세요.")
            return

        user_id = update.effective_user.id
        manager = self._get_game_manager(user_id, update.effective_chat.id)
        session = await manager.start_ai_game(str(user_id), difficulty)

        logger.info(f"User {user_id} started an AI game ({manager.ai_player.difficulty.value})")
        await self._safe_reply(
            update,
            f"🎮 게임 시작! 상대: AI ({manager.ai_player.difficulty.display_name})\n"
            f"⏱ 제한 시간: {session.time_limit:.0f}초\n\n"
            "먼저 아무 단어나 입력하세요.",
        )

    async def forfeit_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /forfeit command"""
        if not update.effective_user:
            return

        manager = self._find_game_manager(update.effective_user.id)
        if manager is None or not manager.is_game_active:
            await self._safe_reply(update, NO_GAME_MESSAGE)
            return

        # The game end listener announces the result
        result = await manager.forfeit(str(update.effective_user.id))
        if result is None:
            await self._safe_reply(update, "⏳ 내 차례에만 포기할 수 있습니다.")

    async def stats_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /stats command"""
        if not update.effective_user:
            return

        user = self.db_manager.get_user(str(update.effective_user.id))
        if not user:
            await self._safe_reply(
                update, "❌ 사용자를 찾을 수 없습니다. /start 로 등록하세요."
            )
            return

        stats = self.progression.get_experience_stats(user)
        await self._safe_reply(update, format_user_stats(user, stats), parse_mode="HTML")

    async def hint_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /hint command"""
        if not update.effective_user:
            return

        manager = self._find_game_manager(update.effective_user.id)
        if manager is None or not manager.is_game_active:
            await self._safe_reply(update, NO_GAME_MESSAGE)
            return

        session = manager.current_session
        required_char = session.required_char
        if required_char is None:
            await self._safe_reply(update, "💡 첫 단어는 아무 단어나 입력할 수 있습니다.")
            return

        hint = self.dictionary.get_hint(required_char, session.used_words)
        if hint is None:
            await self._safe_reply(
                update, f"💡 '{required_char}'(으)로 시작하는 남은 단어가 없습니다."
            )
            return

        await self._safe_reply(update, f"💡 힌트: {hint}")
