"""Tests for todobot.adapters.telegram_notifier — TelegramNotifier."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from telegram.constants import ParseMode
from telegram.error import Forbidden, NetworkError

from todobot.adapters.telegram_notifier import TelegramNotifier
from todobot.core.errors import DependencyError


@pytest.mark.asyncio
async def test_sends_html_message():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    await TelegramNotifier(bot).send_message(12345, "<b>hi</b>")
    bot.send_message.assert_awaited_once_with(
        chat_id=12345, text="<b>hi</b>", parse_mode=ParseMode.HTML,
    )


@pytest.mark.asyncio
async def test_blocked_user_raises_dependency_error():
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=Forbidden("bot was blocked by the user"))
    with pytest.raises(DependencyError, match="blocked"):
        await TelegramNotifier(bot).send_message(12345, "hi")


@pytest.mark.asyncio
async def test_network_error_raises_dependency_error():
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=NetworkError("connection reset"))
    with pytest.raises(DependencyError):
        await TelegramNotifier(bot).send_message(12345, "hi")
