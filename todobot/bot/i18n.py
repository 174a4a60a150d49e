"""
Todo Reminder Bot — Localized strings.

A Translator is picked per request from the user's stored language and
passed to whatever renders text. The string tables are read-only; a
missing key or an unknown language falls back to English.
"""

from __future__ import annotations

import logging
from functools import lru_cache

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "en": "English",
    "th": "ไทย (Thai)",
}

_EN: dict[str, str] = {
    "welcome": (
        "👋 Welcome to Todo Bot, <b>{name}</b>!\n\n"
        "I'll help you manage your tasks efficiently."
    ),
    "main_menu": (
        "🏠 <b>Main Menu</b>\n\n"
        "📊 <b>Your Statistics:</b>\n"
        "• Total Tasks: <b>{total}</b>\n"
        "• Completed: <b>{completed}</b>\n"
        "• Pending: <b>{pending}</b>\n"
        "• Success Rate: <b>{rate:.1f}%</b>"
    ),
    "btn_tasks": "📋 My Tasks",
    "btn_stats": "📊 Statistics",
    "btn_reminders": "⏰ Reminders",
    "btn_settings": "⚙️ Settings",
    "btn_server_stats": "🖥️ Server Stats",
    "btn_help": "❓ Help",
    "btn_main_menu": "🏠 Main Menu",
    "btn_complete": "✅ {number}",
    "btn_delete": "🗑️ {number}",
    "btn_refresh": "🔄 Refresh",
    "help": (
        "🤖 <b>Todo Bot Help</b>\n\n"
        "📝 <b>Task Management:</b>\n"
        "• /add &lt;title&gt; [| description] [!high|!medium|!low] - Create a new task\n"
        "• /list - View all your tasks\n"
        "• /stats - View your task statistics\n\n"
        "🔧 <b>Task Actions:</b>\n"
        "• /complete &lt;number&gt; - Mark a task as completed\n"
        "• /delete &lt;number&gt; - Delete a task\n\n"
        "⏰ <b>Reminders:</b>\n"
        "• /remind &lt;number&gt; [time] [xN] - Set a reminder for a task\n"
        "• /reminders - List your active reminders\n"
        "• /snooze &lt;reminder&gt; [time] - Snooze a reminder\n\n"
        "⏱ <b>Time formats:</b> 30m, 2h, 1d, 1w\n\n"
        "📊 <b>Examples:</b>\n"
        "• /add Buy groceries\n"
        "• /complete 1\n"
        "• /remind 1 2h\n"
        "• /remind 1 1d x7 (every day, 7 times)\n"
        "• /snooze 1 30m\n\n"
        "⚙️ <b>Settings:</b>\n"
        "• /start - Main menu\n"
        "• /settings - Language and preferences\n"
        "• /language en|th - Change language\n"
        "• /serverstats - Server statistics"
    ),
    "register_first": "Please start with /start first",
    "add_usage": "Please provide a task title. Example: /add Buy groceries",
    "task_created": "✅ Task created successfully!\n\n<b>{title}</b>",
    "no_tasks": "You don't have any todos yet. Use /add to create one!",
    "tasks_header": "📋 <b>Your Todos:</b>",
    "task_completed": "✅ Task completed successfully!\n\n<b>{title}</b>",
    "task_deleted": "🗑️ Task deleted successfully!\n\n<b>{title}</b>",
    "number_usage": "Please provide a task number. Example: /{command} 1",
    "invalid_number": "Invalid number. Please use a number like 1, 2, 3...",
    "remind_usage": "Please provide task number and time. Example: /remind 1 2h",
    "reminder_set": (
        "⏰ Reminder set successfully!\n\n"
        "I'll remind you about <b>{title}</b> in {duration}\n\n📅 {when}"
    ),
    "reminder_repeats": "🔁 {count} times, every {interval}h",
    "snooze_usage": (
        "Please provide a reminder number and time. Example: /snooze 1 30m\n"
        "Use /reminders to see the numbers."
    ),
    "reminder_snoozed": (
        "😴 Reminder snoozed successfully!\n\n"
        "I'll remind you again about <b>{title}</b>\n\n📅 {when}"
    ),
    "no_reminders": "You don't have any active reminders. Use /remind to set one!",
    "reminders_header": "⏰ <b>Your Reminders:</b>",
    "reminder_line": "{number}. <b>{title}</b> — 📅 {when}",
    "reminder_line_snoozed": " (😴 until {until})",
    "reminder_line_repeats": " (🔁 x{count})",
    "stats": (
        "📊 <b>Your Todo Statistics</b>\n\n"
        "📈 <b>Overview:</b>\n"
        "• Total tasks: {total}\n"
        "• Completed: {completed}\n"
        "• Pending: {pending}\n"
        "• Overdue: {overdue}\n\n"
        "🎯 <b>Priority Breakdown:</b>\n"
        "• High priority: {high}\n"
        "• Medium priority: {medium}\n"
        "• Low priority: {low}\n\n"
        "📈 <b>Completion Rate:</b>\n"
        "• {rate:.1f}% completed"
    ),
    "settings": (
        "⚙️ <b>Settings</b>\n\n"
        "👤 <b>User Info:</b>\n"
        "• Name: <b>{name}</b>\n"
        "• Timezone: <b>{timezone}</b>\n"
        "• Default reminder: <b>{interval}h</b>\n"
        "• Notification style: <b>{style}</b>\n\n"
        "Current language: <b>{language}</b>\n\n"
        "🌐 Choose your preferred language:"
    ),
    "language_usage": "Usage: /language en|th",
    "language_changed": "Language changed to {language}!",
    "reminder_detailed": (
        "⏰ <b>Reminder!</b>\n\n"
        "📝 <b>{title}</b>\n\n"
        "{description}\n\n"
        "Don't forget to complete this task! 💪\n\n"
        "Use /complete {number} to mark it done"
    ),
    "reminder_compact": "⏰ <b>{title}</b> — /complete {number}",
    "no_description": "No description",
    "priority_high": "🔴",
    "priority_medium": "🟡",
    "priority_low": "🟢",
    "error_generic": "Sorry, something went wrong. Please try again later.",
    "error_input": "⚠️ {message}",
    "unknown_command": "Unknown command. Use /help to see available commands.",
    "text_hint": "I can help you manage your todos! Use /help to see available commands.",
    "server_stats": (
        "🖥️ <b>Server Statistics</b>\n\n"
        "📊 <b>System Info:</b>\n"
        "• <b>OS:</b> {os_name}\n"
        "• <b>Platform:</b> {platform}\n"
        "• <b>Architecture:</b> {architecture}\n"
        "• <b>Hostname:</b> {hostname}\n"
        "• <b>Uptime:</b> {uptime}\n\n"
        "💻 <b>Hardware:</b>\n"
        "• <b>CPU Usage:</b> {cpu:.1f}%\n"
        "• <b>CPU Cores:</b> {cores}\n"
        "• <b>Memory:</b> {memory_used} / {memory_total} ({memory_percent:.1f}%)\n"
        "• <b>Disk:</b> {disk_used} / {disk_total} ({disk_percent:.1f}%)\n\n"
        "🤖 <b>Bot Info:</b>\n"
        "• <b>Version:</b> {version}\n"
        "• <b>Python Version:</b> {python_version}\n"
        "• <b>Process ID:</b> {pid}"
    ),
}

_TH: dict[str, str] = {
    "welcome": (
        "👋 ยินดีต้อนรับสู่ Todo Bot, <b>{name}</b>!\n\n"
        "ฉันจะช่วยคุณจัดการงานของคุณอย่างมีประสิทธิภาพ"
    ),
    "main_menu": (
        "🏠 <b>เมนูหลัก</b>\n\n"
        "📊 <b>สถิติของคุณ:</b>\n"
        "• งานทั้งหมด: <b>{total}</b>\n"
        "• เสร็จแล้ว: <b>{completed}</b>\n"
        "• รอดำเนินการ: <b>{pending}</b>\n"
        "• อัตราความสำเร็จ: <b>{rate:.1f}%</b>"
    ),
    "btn_tasks": "📋 งานของฉัน",
    "btn_stats": "📊 สถิติ",
    "btn_reminders": "⏰ การแจ้งเตือน",
    "btn_settings": "⚙️ การตั้งค่า",
    "btn_server_stats": "🖥️ สถิติเซิร์ฟเวอร์",
    "btn_help": "❓ ความช่วยเหลือ",
    "btn_main_menu": "🏠 เมนูหลัก",
    "no_tasks": "คุณยังไม่มีงาน ใช้ /add เพื่อสร้างงานใหม่!",
    "tasks_header": "📋 <b>งานของคุณ:</b>",
    "task_completed": "✅ ทำงานเสร็จสิ้นแล้ว!\n\n<b>{title}</b>",
    "task_deleted": "🗑️ ลบงานเรียบร้อยแล้ว!\n\n<b>{title}</b>",
    "invalid_number": "หมายเลขไม่ถูกต้อง กรุณาใช้ตัวเลขเช่น 1, 2, 3...",
    "reminder_set": (
        "⏰ ตั้งการแจ้งเตือนเรียบร้อยแล้ว!\n\n"
        "ฉันจะแจ้งเตือนเรื่อง <b>{title}</b> ในอีก {duration}\n\n📅 {when}"
    ),
    "language_changed": "เปลี่ยนภาษาเป็น {language} เรียบร้อยแล้ว!",
    "reminder_detailed": (
        "⏰ <b>แจ้งเตือน!</b>\n\n"
        "📝 <b>{title}</b>\n\n"
        "{description}\n\n"
        "อย่าลืมทำงานนี้ให้เสร็จนะ! 💪\n\n"
        "ใช้ /complete {number} เพื่อทำเครื่องหมายว่าเสร็จ"
    ),
    "no_description": "ไม่มีคำอธิบาย",
    "text_hint": "ฉันช่วยคุณจัดการงานได้! ใช้ /help เพื่อดูคำสั่งทั้งหมด",
}

_TABLES: dict[str, dict[str, str]] = {
    "en": _EN,
    "th": _TH,
}


class Translator:
    """String lookup for one language, falling back to English."""

    def __init__(self, language: str = "en") -> None:
        self.language = language if language in _TABLES else "en"
        self._table = _TABLES[self.language]

    def t(self, key: str, **kwargs: object) -> str:
        template = self._table.get(key)
        if template is None:
            template = _EN.get(key)
        if template is None:
            logger.warning("Missing translation key %r", key)
            return key
        return template.format(**kwargs) if kwargs else template


@lru_cache(maxsize=None)
def get_translator(language: str | None) -> Translator:
    """Translator for a user's stored language code."""
    return Translator((language or "en").lower())
