"""
Telegram bot handler for the Word Chain League
"""

import logging
from functools import wraps

from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from .config import get_settings
from .core.database.database_manager import get_db_manager
from .core.game.game_manager import GameManager, GameResult
from .core.game.session import GameSession
from .core.handlers.command_handlers import CommandHandlers
from .core.handlers.message_handlers import MessageHandlers
from .core.progression.engine import ProgressionEngine
from .dictionary import get_dictionary
from .utils import format_game_result, format_level_up

logger = logging.getLogger(__name__)


class BotHandler:
    """Main Telegram bot handler"""

    def __init__(self, settings=None, db_manager=None, dictionary=None):
        self.settings = settings or get_settings()
        self.db_manager = db_manager or get_db_manager()
        self.dictionary = dictionary or get_dictionary()
        self.progression = ProgressionEngine(
            ledger=self.db_manager,
            user_store=self.db_manager,
            timezone=self.settings.timezone,
        )

        self.application = None

        # One game manager per Telegram user, bound to the chat it was started in
        self.game_managers: dict[int, GameManager] = {}
        self.game_chats: dict[int, int] = {}

        self.command_handlers = CommandHandlers(
            db_manager=self.db_manager,
            dictionary=self.dictionary,
            progression=self.progression,
            safe_reply_callback=self._safe_reply,
            get_game_manager_callback=self.get_game_manager,
            find_game_manager_callback=self.find_game_manager,
        )

        self.message_handlers = MessageHandlers(
            safe_reply_callback=self._safe_reply,
            find_game_manager_callback=self.find_game_manager,
        )

    def _is_user_authorized(self, user_id: int) -> bool:
        """Check if user is authorized to use the bot"""
        if not self.settings.allowed_users_list:
            return False
        return user_id in self.settings.allowed_users_list

    async def _check_authorization(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> bool:
        """Check if user is authorized and send unauthorized message if not"""
        user_id = update.effective_user.id

        if not self._is_user_authorized(user_id):
            await self._safe_reply(
                update,
                "❌ 이 봇을 사용할 권한이 없습니다. 관리자에게 문의하세요.",
            )
            logger.warning(f"Unauthorized access attempt from user {user_id}")
            return False

        return True

    def require_authorization(self, func):
        """Decorator to require authorization for handler functions"""

        @wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
            if not await self._check_authorization(update, context):
                return
            return await func(update, context)

        return wrapper

    def get_game_manager(self, user_id: int, chat_id: int) -> GameManager:
        """Get or create the game manager of a user, routing its events to chat_id"""
        self.game_chats[user_id] = chat_id
        manager = self.game_managers.get(user_id)
        if manager is None:
            manager = GameManager(
                self.dictionary, progression=self.progression, settings=self.settings
            )
            manager.add_game_end_listener(
                lambda result: self._on_game_end(user_id, result)
            )
            manager.add_ai_move_listener(
                lambda session, word: self._on_ai_move(user_id, session, word)
            )
            self.game_managers[user_id] = manager
            logger.debug(f"Created game manager for user {user_id}")
        return manager

    def find_game_manager(self, user_id: int) -> GameManager | None:
        """Existing game manager of a user, if any"""
        return self.game_managers.get(user_id)

    async def _on_game_end(self, user_id: int, result: GameResult):
        chat_id = self.game_chats.get(user_id)
        if chat_id is None:
            return

        await self._send_message(
            chat_id, format_game_result(result, str(user_id)), parse_mode="HTML"
        )
        for event in result.level_ups:
            await self._send_message(chat_id, format_level_up(event))

    async def _on_ai_move(self, user_id: int, session: GameSession, word: str):
        chat_id = self.game_chats.get(user_id)
        if chat_id is None:
            return

        await self._send_message(
            chat_id,
            f"🤖 {word}\n👉 '{session.required_char}'(으)로 시작하는 단어를 입력하세요.",
        )

    def run(self):
        """Run the bot (synchronous entry point)"""
        logger.info("Starting Word Chain League bot...")

        # Initialize database
        self.db_manager.init_database()

        # Create application
        self.application = (
            Application.builder()
            .token(self.settings.telegram_bot_token)
            .read_timeout(30)
            .write_timeout(30)
            .connect_timeout(30)
            .pool_timeout(30)
            .post_init(self.setup_bot_menu)
            .post_shutdown(self.shutdown_games)
            .build()
        )

        # Add handlers
        self._add_handlers()

        # Start polling
        logger.info("Bot started successfully!")
        self.application.run_polling(
            poll_interval=self.settings.polling_interval,
            timeout=10,
            bootstrap_retries=3,
        )

    def _add_handlers(self):
        """Add command and message handlers"""
        app = self.application

        commands = {
            "start": self.command_handlers.start_command,
            "help": self.command_handlers.help_command,
            "play": self.command_handlers.play_command,
            "forfeit": self.command_handlers.forfeit_command,
            "stats": self.command_handlers.stats_command,
            "hint": self.command_handlers.hint_command,
        }
        for name, callback in commands.items():
            app.add_handler(CommandHandler(name, self.require_authorization(callback)))

        # Plain text is a word submission
        app.add_handler(
            MessageHandler(
                filters.TEXT & ~filters.COMMAND,
                self.require_authorization(self.message_handlers.handle_message),
            )
        )

        # Error handler
        app.add_error_handler(self.error_handler)

    async def setup_bot_menu(self, application):
        """Setup bot menu with commands for better UX"""
        commands = [
            BotCommand("play", "🎮 AI와 끝말잇기 시작"),
            BotCommand("forfeit", "🏳️ 게임 포기"),
            BotCommand("hint", "💡 힌트 보기"),
            BotCommand("stats", "📊 내 기록 보기"),
            BotCommand("help", "❓ 도움말"),
        ]

        try:
            await application.bot.set_my_commands(commands)
            logger.info("Bot menu commands set successfully")
        except TelegramError as e:
            logger.error(f"Failed to set bot menu commands: {e}")

    async def shutdown_games(self, application=None):
        """Stop timers and pending AI moves of every game"""
        for manager in self.game_managers.values():
            await manager.shutdown()
        logger.info(f"Stopped {len(self.game_managers)} game managers")

    async def _safe_reply(self, update_or_message, text: str, **kwargs):
        """Safely send a reply message"""
        try:
            if hasattr(update_or_message, "message"):
                # It's an Update object
                message = await update_or_message.message.reply_text(text, **kwargs)
            else:
                # It's a Message object
                message = await update_or_message.reply_text(text, **kwargs)

            if message is None:
                logger.warning("Telegram API returned None message")
            return message
        except TelegramError as e:
            logger.error(f"Error sending reply: {e}")
            logger.error(f"Failed text: {text[:100]}...")
            return None

    async def _send_message(self, chat_id: int, text: str, **kwargs):
        """Safely send a message outside of an update context"""
        if self.application is None:
            logger.debug(f"No application, dropping message to chat {chat_id}")
            return None
        try:
            return await self.application.bot.send_message(
                chat_id=chat_id, text=text, **kwargs
            )
        except TelegramError as e:
            logger.error(f"Failed to send message to chat {chat_id}: {e}")
            return None

    async def error_handler(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors"""
        logger.error(f"Update {update} caused error {context.error}")
