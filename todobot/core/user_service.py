"""User registration and per-user settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from todobot.core.errors import NotFoundError, ValidationError
from todobot.data.models import NotificationStyle, User

if TYPE_CHECKING:
    from todobot.data.db import TodoDB

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "th")
_STYLES = {s.value for s in NotificationStyle}


class UserService:
    def __init__(
        self,
        db: TodoDB,
        default_timezone: str = "UTC",
        default_language: str = "en",
    ) -> None:
        self._db = db
        self._default_timezone = default_timezone
        self._default_language = (
            default_language if default_language in SUPPORTED_LANGUAGES else "en"
        )

    def ensure_user(self, telegram_id: int, name: str) -> User:
        """Return the user for a Telegram account, registering it on first contact."""
        user = self._db.get_user_by_telegram_id(telegram_id)
        if user is not None:
            return user
        return self._db.create_user(
            telegram_id,
            (name or "").strip() or str(telegram_id),
            timezone_name=self._default_timezone,
            language=self._default_language,
        )

    def get_by_telegram_id(self, telegram_id: int) -> User | None:
        return self._db.get_user_by_telegram_id(telegram_id)

    def set_language(self, user_id: str, language: str) -> None:
        language = (language or "").strip().lower()
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(f"Unsupported language {language!r}")
        if not self._db.update_user_language(user_id, language):
            raise NotFoundError(f"User {user_id} not found")

    def update_settings(
        self,
        user_id: str,
        *,
        timezone_name: str | None = None,
        default_reminder_interval: int | None = None,
        notification_style: str | None = None,
    ) -> User:
        """Validate and store the given settings; omitted ones stay as they are."""
        if timezone_name is not None:
            try:
                ZoneInfo(timezone_name)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValidationError(f"Unknown timezone {timezone_name!r}") from exc

        if default_reminder_interval is not None and not 1 <= default_reminder_interval <= 168:
            raise ValidationError("Default reminder interval must be 1-168 hours")

        if notification_style is not None:
            notification_style = notification_style.strip().lower()
            if notification_style not in _STYLES:
                raise ValidationError("Notification style must be 'detailed' or 'compact'")

        user = self._db.update_user_settings(
            user_id,
            timezone_name=timezone_name,
            default_reminder_interval=default_reminder_interval,
            notification_style=notification_style,
        )
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        logger.info("Settings updated for user %s", user_id)
        return user
