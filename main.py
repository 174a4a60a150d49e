"""
Todo Reminder Bot — Entry Point.

Single entry point: `python main.py` starts the Telegram bot.
"""

import logging

from todobot.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from todobot.bot.telegram_bot import main

if __name__ == "__main__":
    main()
