"""
Message handlers for the Word Chain League bot
"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from ...words import Word
from .command_handlers import NO_GAME_MESSAGE

logger = logging.getLogger(__name__)


class MessageHandlers:
    """Handles plain text messages as word submissions"""

    def __init__(self, safe_reply_callback, find_game_manager_callback):
        self._safe_reply = safe_reply_callback
        self._find_game_manager = find_game_manager_callback

    async def handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Submit the message text as the user's next word"""
        if not update.message or not update.effective_user:
            return

        text = (update.message.text or "").strip()
        if not text:
            return

        user_id = update.effective_user.id
        manager = self._find_game_manager(user_id)
        if manager is None or not manager.is_game_active:
            await self._safe_reply(update, NO_GAME_MESSAGE)
            return

        validation = await manager.submit_word(text, str(user_id))
        if not validation.is_valid:
            await self._safe_reply(update, f"❌ {validation.message}")
            return

        word = Word(text)
        await self._safe_reply(
            update, f"✅ {word.text} ({word.difficulty.value} +{word.experience_points})"
        )
