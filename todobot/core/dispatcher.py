"""
Todo Reminder Bot — Notification Dispatcher.

Turns a due reminder into a localized message and hands it to the
notification port. A send never raises to the caller: success or failure
comes back as a bool so the reminder checker can decide whether the
reminder has been delivered.
"""

from __future__ import annotations

import asyncio
import html
import logging
from typing import TYPE_CHECKING, Callable

from todobot.bot.i18n import Translator, get_translator
from todobot.data.models import NotificationStyle

if TYPE_CHECKING:
    from todobot.data.models import Reminder, Task, User
    from todobot.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        notifier: NotificationPort,
        translator_factory: Callable[[str | None], Translator] = get_translator,
        send_timeout: float = 15.0,
    ) -> None:
        self._notifier = notifier
        self._translator_factory = translator_factory
        self._send_timeout = send_timeout

    def format_reminder(self, task: Task, user: User, task_number: int) -> str:
        """Render the reminder text in the user's language and style.

        Task text is user input, so it is HTML-escaped before it goes into
        the HTML message.
        """
        tr = self._translator_factory(user.language)
        title = html.escape(task.title)

        if user.notification_style == NotificationStyle.COMPACT.value:
            return tr.t("reminder_compact", title=title, number=task_number)

        if task.description:
            description = html.escape(task.description)
        else:
            description = tr.t("no_description")
        return tr.t(
            "reminder_detailed",
            title=title,
            description=description,
            number=task_number,
        )

    async def send(self, user: User, text: str) -> bool:
        """Deliver a message. Returns False instead of raising on any failure."""
        try:
            await asyncio.wait_for(
                self._notifier.send_message(user.telegram_id, text),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Send to telegram user %d timed out after %.1fs",
                user.telegram_id, self._send_timeout,
            )
            return False
        except Exception as exc:
            logger.warning("Send to telegram user %d failed: %s", user.telegram_id, exc)
            return False
        return True

    async def dispatch(
        self,
        reminder: Reminder,
        task: Task,
        user: User,
        task_number: int,
    ) -> bool:
        text = self.format_reminder(task, user, task_number)
        sent = await self.send(user, text)
        if sent:
            logger.info(
                "Reminder %s for task %s sent to telegram user %d",
                reminder.id, task.id, user.telegram_id,
            )
        return sent
