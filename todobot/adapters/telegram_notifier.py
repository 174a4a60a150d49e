"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance to satisfy the NotificationPort protocol.
Messages are sent with HTML parse mode; callers escape user text.
"""

from __future__ import annotations

import logging

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import Forbidden, TelegramError

from todobot.core.errors import DependencyError

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_message(self, user_id: int, text: str) -> None:
        try:
            await self._bot.send_message(chat_id=user_id, text=text, parse_mode=ParseMode.HTML)
        except Forbidden as exc:
            raise DependencyError(f"User {user_id} blocked the bot: {exc}") from exc
        except TelegramError as exc:
            raise DependencyError(f"Telegram send to {user_id} failed: {exc}") from exc
