#!/usr/bin/env python3
"""
Word Chain League Telegram Bot
Main application entry point
"""

import logging

from wordchain.bot_handler import BotHandler
from wordchain.config import get_settings


def main():
    """Main application entry point"""
    # Load configuration
    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting Word Chain League bot...")

    bot_handler = BotHandler(settings)

    try:
        # run_polling owns the event loop until the bot is stopped
        bot_handler.run()
        logger.info("Bot stopped gracefully")
    except KeyboardInterrupt:
        logger.info("Shutdown requested, stopping bot...")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        raise


if __name__ == "__main__":
    main()
