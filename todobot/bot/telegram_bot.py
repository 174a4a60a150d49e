"""
Todo Reminder Bot — Telegram Bot.

Telegram is the only user interface. Commands manage tasks and reminders;
inline buttons offer shortcuts for the same actions. A repeating job on the
application's JobQueue runs the reminder checker.

Handlers stay thin: they parse arguments, call the services kept in
bot_data and render the result in the caller's language.
"""

from __future__ import annotations

import asyncio
import html
import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from todobot.bot.i18n import LANGUAGE_NAMES, Translator, get_translator
from todobot.config import settings
from todobot.core.errors import DependencyError, NotFoundError, ValidationError
from todobot.core.server_stats import collect_server_stats, format_bytes, format_uptime
from todobot.data.models import Priority, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from todobot.core.reminder_scheduler import ReminderScheduler
    from todobot.core.reminder_service import ReminderService
    from todobot.core.server_stats import ServerStats
    from todobot.core.task_service import TaskService
    from todobot.core.user_service import UserService
    from todobot.data.db import TodoDB
    from todobot.data.models import ReminderView, Task, TaskStats, User
    from todobot.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Coroutine[Any, Any, None]]
UserHandler = Callable[..., Coroutine[Any, Any, None]]

MAX_TASK_BUTTONS = 10

_PRIORITY_MARKERS = {f"!{p.value}": p.value for p in Priority}


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(func: Handler) -> Handler:
    """Decorator that silently ignores users outside ALLOWED_USER_IDS.

    An empty allow-list leaves the bot open to everyone.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        allowed = settings.ALLOWED_USER_IDS
        if user is None or (allowed and user.id not in allowed):
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return  # Silent ignore
        return await func(update, context)

    return wrapper


def with_user(func: UserHandler) -> Handler:
    """Resolve the caller's stored user and translator, and map service errors.

    The wrapped handler is called as func(update, context, user, tr).
    Input errors get a corrective reply; storage failures a generic one.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.callback_query is not None:
            await update.callback_query.answer()

        users: UserService = context.bot_data["users"]
        tg_user = update.effective_user
        tr = get_translator(settings.DEFAULT_LANGUAGE)
        try:
            user = users.ensure_user(tg_user.id, tg_user.first_name or "")
            tr = get_translator(user.language)
            await func(update, context, user, tr)
        except (ValidationError, NotFoundError) as exc:
            await _reply(update, tr.t("error_input", message=html.escape(str(exc), quote=False)))
        except DependencyError as exc:
            logger.error("Storage error in %s: %s", func.__name__, exc)
            await _reply(update, tr.t("error_generic"))

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _reply(
    update: Update,
    text: str,
    markup: InlineKeyboardMarkup | None = None,
) -> None:
    """Answer a command with a new message, or a button press by editing it."""
    if update.callback_query is not None:
        await update.callback_query.edit_message_text(
            text, parse_mode=ParseMode.HTML, reply_markup=markup,
        )
    else:
        await update.message.reply_text(
            text, parse_mode=ParseMode.HTML, reply_markup=markup,
        )


def _services(context: ContextTypes.DEFAULT_TYPE) -> tuple[TaskService, ReminderService]:
    return context.bot_data["tasks"], context.bot_data["reminders"]


def _parse_position(args: list[str] | None) -> int | None:
    """First argument as a task/reminder number, or None if it isn't one."""
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        return None


def _parse_repeat(token: str) -> int | None:
    """'x7' -> 7; anything else -> None."""
    token = token.strip().lower()
    if len(token) > 1 and token[0] == "x" and token[1:].isdecimal():
        return int(token[1:])
    return None


def parse_add_args(text: str) -> tuple[str, str | None, str, str | None]:
    """Split '/add' arguments into (title, description, priority, tags).

    Format: ``<title> [| description] [!high|!medium|!low] [#tag ...]``.
    Priority markers and tags may appear anywhere in the title part.
    """
    head, sep, tail = text.partition("|")
    description = tail.strip() or None if sep else None

    priority = Priority.MEDIUM.value
    tags: list[str] = []
    words: list[str] = []
    for word in head.split():
        lowered = word.lower()
        if lowered in _PRIORITY_MARKERS:
            priority = _PRIORITY_MARKERS[lowered]
        elif word.startswith("#") and len(word) > 1:
            tags.append(word[1:])
        else:
            words.append(word)
    return " ".join(words), description, priority, ",".join(tags) or None


def _fmt_time(value: datetime, user: User) -> str:
    """Render a stored UTC time in the user's timezone."""
    try:
        zone = ZoneInfo(user.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    return value.astimezone(zone).strftime("%Y-%m-%d %H:%M %Z")


def _fmt_duration(token: str) -> str:
    units = {"m": "minute", "h": "hour", "d": "day", "w": "week"}
    token = token.strip().lower()
    amount, unit = int(token[:-1]), units[token[-1]]
    return f"{amount} {unit}{'s' if amount != 1 else ''}"


# ---------------------------------------------------------------------------
# Renderers (shared by commands and menu buttons)
# ---------------------------------------------------------------------------


def _menu_keyboard(tr: Translator) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton(tr.t("btn_tasks"), callback_data="menu:tasks"),
            InlineKeyboardButton(tr.t("btn_stats"), callback_data="menu:stats"),
        ],
        [
            InlineKeyboardButton(tr.t("btn_reminders"), callback_data="menu:reminders"),
            InlineKeyboardButton(tr.t("btn_settings"), callback_data="menu:settings"),
        ],
        [
            InlineKeyboardButton(tr.t("btn_server_stats"), callback_data="menu:serverstats"),
            InlineKeyboardButton(tr.t("btn_help"), callback_data="menu:help"),
        ],
    ])


def _back_keyboard(tr: Translator) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(tr.t("btn_main_menu"), callback_data="menu:main")]]
    )


def _server_stats_keyboard(tr: Translator) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[
        InlineKeyboardButton(tr.t("btn_refresh"), callback_data="menu:serverstats"),
        InlineKeyboardButton(tr.t("btn_main_menu"), callback_data="menu:main"),
    ]])


def _language_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(name, callback_data=f"lang:{code}")]
        for code, name in LANGUAGE_NAMES.items()
    ])


def render_main_menu(stats: TaskStats, tr: Translator) -> str:
    return tr.t(
        "main_menu",
        total=stats.total,
        completed=stats.completed,
        pending=stats.pending,
        rate=stats.completion_rate,
    )


def render_tasks(
    tasks: list[Task], tr: Translator, now: datetime,
) -> tuple[str, InlineKeyboardMarkup | None]:
    """Numbered task list plus complete/delete buttons for pending tasks."""
    if not tasks:
        return tr.t("no_tasks"), None

    lines = [tr.t("tasks_header"), ""]
    rows: list[list[InlineKeyboardButton]] = []
    for number, task in enumerate(tasks, start=1):
        status = "✅" if task.is_completed else "⏳"
        icon = tr.t(f"priority_{task.priority}")
        line = f"{number}. {status} {icon} <b>{html.escape(task.title)}</b>"
        if task.is_overdue(now):
            line += " ⚠️"
        lines.append(line)
        if task.description:
            lines.append(f"   <i>{html.escape(task.description)}</i>")

        if not task.is_completed and len(rows) < MAX_TASK_BUTTONS:
            rows.append([
                InlineKeyboardButton(
                    tr.t("btn_complete", number=number),
                    callback_data=f"complete:{task.id}",
                ),
                InlineKeyboardButton(
                    tr.t("btn_delete", number=number),
                    callback_data=f"delete:{task.id}",
                ),
            ])
    return "\n".join(lines), InlineKeyboardMarkup(rows) if rows else None


def render_stats(stats: TaskStats, tr: Translator) -> str:
    return tr.t(
        "stats",
        total=stats.total,
        completed=stats.completed,
        pending=stats.pending,
        overdue=stats.overdue,
        high=stats.high_priority,
        medium=stats.medium_priority,
        low=stats.low_priority,
        rate=stats.completion_rate,
    )


def render_reminders(views: list[ReminderView], user: User, tr: Translator) -> str:
    if not views:
        return tr.t("no_reminders")

    lines = [tr.t("reminders_header"), ""]
    for number, view in enumerate(views, start=1):
        reminder = view.reminder
        line = tr.t(
            "reminder_line",
            number=number,
            title=html.escape(view.task_title),
            when=_fmt_time(reminder.next_notify_time, user),
        )
        if reminder.snoozed_until is not None:
            line += tr.t("reminder_line_snoozed", until=_fmt_time(reminder.snoozed_until, user))
        if reminder.repeat_count > 1:
            line += tr.t("reminder_line_repeats", count=reminder.repeat_count)
        lines.append(line)
    return "\n".join(lines)


def render_settings(user: User, tr: Translator) -> str:
    return tr.t(
        "settings",
        name=html.escape(user.name),
        timezone=user.timezone,
        interval=user.default_reminder_interval,
        style=user.notification_style,
        language=LANGUAGE_NAMES.get(user.language, user.language),
    )


def render_server_stats(stats: ServerStats, tr: Translator) -> str:
    return tr.t(
        "server_stats",
        os_name=html.escape(stats.os_name),
        platform=html.escape(stats.platform),
        architecture=html.escape(stats.architecture),
        hostname=html.escape(stats.hostname),
        uptime=format_uptime(stats.uptime_seconds),
        cpu=stats.cpu_percent,
        cores=stats.cpu_cores,
        memory_used=format_bytes(stats.memory_used),
        memory_total=format_bytes(stats.memory_total),
        memory_percent=stats.memory_percent,
        disk_used=format_bytes(stats.disk_used),
        disk_total=format_bytes(stats.disk_total),
        disk_percent=stats.disk_percent,
        version=stats.version,
        python_version=stats.python_version,
        pid=stats.pid,
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
@with_user
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Register the caller on first contact and show the main menu."""
    tasks, _ = _services(context)
    stats = tasks.stats(user.id)
    text = tr.t("welcome", name=html.escape(user.name)) + "\n\n" + render_main_menu(stats, tr)
    await _reply(update, text, _menu_keyboard(tr))


@authorized_only
@with_user
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    await _reply(update, tr.t("help"))


@authorized_only
@with_user
async def cmd_add(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Create a task: /add <title> [| description] [!priority] [#tag]."""
    if not context.args:
        await _reply(update, tr.t("add_usage"))
        return

    title, description, priority, tags = parse_add_args(" ".join(context.args))
    if not title:
        await _reply(update, tr.t("add_usage"))
        return

    tasks, _ = _services(context)
    task = tasks.create(user.id, title, description=description, priority=priority, tags=tags)
    logger.info("Task %s created for user %s", task.id, user.id)
    await _reply(update, tr.t("task_created", title=html.escape(task.title)))


@authorized_only
@with_user
async def cmd_list(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    tasks, _ = _services(context)
    text, markup = render_tasks(tasks.list(user.id), tr, utcnow())
    await _reply(update, text, markup)


@authorized_only
@with_user
async def cmd_complete(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    if not context.args:
        await _reply(update, tr.t("number_usage", command="complete"))
        return
    position = _parse_position(context.args)
    if position is None:
        await _reply(update, tr.t("invalid_number"))
        return

    tasks, _ = _services(context)
    task = tasks.complete_by_position(user.id, position)
    await _reply(update, tr.t("task_completed", title=html.escape(task.title)))


@authorized_only
@with_user
async def cmd_delete(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    if not context.args:
        await _reply(update, tr.t("number_usage", command="delete"))
        return
    position = _parse_position(context.args)
    if position is None:
        await _reply(update, tr.t("invalid_number"))
        return

    tasks, _ = _services(context)
    task = tasks.delete_by_position(user.id, position)
    await _reply(update, tr.t("task_deleted", title=html.escape(task.title)))


@authorized_only
@with_user
async def cmd_remind(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Set a reminder: /remind <number> [duration] [xN].

    Without a duration the user's default reminder interval is used.
    """
    args = list(context.args or [])
    if not args:
        await _reply(update, tr.t("remind_usage"))
        return
    position = _parse_position(args)
    if position is None:
        await _reply(update, tr.t("invalid_number"))
        return

    repeat_count = 1
    if len(args) > 1:
        parsed = _parse_repeat(args[-1])
        if parsed is not None:
            repeat_count = parsed
            args.pop()
    duration = args[1] if len(args) > 1 else f"{user.default_reminder_interval}h"

    _, reminders = _services(context)
    reminder, title = reminders.create_for_position(
        user.id, position, duration, repeat_count=repeat_count,
    )
    text = tr.t(
        "reminder_set",
        title=html.escape(title),
        duration=_fmt_duration(duration),
        when=_fmt_time(reminder.next_notify_time, user),
    )
    if reminder.repeat_count > 1:
        text += "\n" + tr.t(
            "reminder_repeats",
            count=reminder.repeat_count,
            interval=reminder.repeat_interval_hours,
        )
    await _reply(update, text)


@authorized_only
@with_user
async def cmd_snooze(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Snooze a reminder: /snooze <reminder number> [duration] (default 30m)."""
    if not context.args:
        await _reply(update, tr.t("snooze_usage"))
        return
    position = _parse_position(context.args)
    if position is None:
        await _reply(update, tr.t("invalid_number"))
        return

    duration = context.args[1] if len(context.args) > 1 else None
    _, reminders = _services(context)
    view = reminders.snooze_by_position(user.id, position, duration)
    await _reply(update, tr.t(
        "reminder_snoozed",
        title=html.escape(view.task_title),
        when=_fmt_time(view.reminder.snoozed_until, user),
    ))


@authorized_only
@with_user
async def cmd_reminders(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    _, reminders = _services(context)
    await _reply(update, render_reminders(reminders.list_for_user(user.id), user, tr))


@authorized_only
@with_user
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    tasks, _ = _services(context)
    await _reply(update, render_stats(tasks.stats(user.id), tr))


@authorized_only
@with_user
async def cmd_settings(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Show settings, or change one: /settings timezone|interval|style <value>."""
    args = context.args or []
    if len(args) >= 2:
        users: UserService = context.bot_data["users"]
        key, value = args[0].lower(), args[1]
        if key == "timezone":
            user = users.update_settings(user.id, timezone_name=value)
        elif key == "interval":
            if not value.isdecimal():
                await _reply(update, tr.t("invalid_number"))
                return
            user = users.update_settings(user.id, default_reminder_interval=int(value))
        elif key == "style":
            user = users.update_settings(user.id, notification_style=value)
        else:
            raise ValidationError("Unknown setting; use timezone, interval or style")

    await _reply(update, render_settings(user, tr), _language_keyboard())


@authorized_only
@with_user
async def cmd_language(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    if not context.args:
        await _reply(update, tr.t("language_usage"), _language_keyboard())
        return

    users: UserService = context.bot_data["users"]
    code = context.args[0].lower()
    users.set_language(user.id, code)
    await _reply(update, get_translator(code).t(
        "language_changed", language=LANGUAGE_NAMES[code],
    ))


@authorized_only
@with_user
async def cmd_serverstats(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Host statistics with a refresh button."""
    stats = await asyncio.to_thread(collect_server_stats)
    await _reply(update, render_server_stats(stats, tr), _server_stats_keyboard(tr))


@authorized_only
async def cmd_unknown(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    users: UserService = context.bot_data["users"]
    user = users.get_by_telegram_id(update.effective_user.id)
    tr = get_translator(user.language if user else settings.DEFAULT_LANGUAGE)
    await update.message.reply_text(tr.t("unknown_command"))


@authorized_only
@with_user
async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    """Plain text that isn't a command: point the user at /help."""
    await _reply(update, tr.t("text_hint"))


# ---------------------------------------------------------------------------
# Inline button callbacks
# ---------------------------------------------------------------------------


def _callback_arg(update: Update) -> str:
    """The part of callback data after 'prefix:'."""
    return update.callback_query.data.split(":", 1)[1]


@authorized_only
@with_user
async def _handle_complete_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    tasks, _ = _services(context)
    task = tasks.complete(_callback_arg(update), owner_id=user.id)
    await _reply(update, tr.t("task_completed", title=html.escape(task.title)), _back_keyboard(tr))


@authorized_only
@with_user
async def _handle_delete_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    tasks, _ = _services(context)
    task_id = _callback_arg(update)
    task = tasks.get(task_id, owner_id=user.id)
    tasks.delete_by_id(task_id, owner_id=user.id)
    await _reply(update, tr.t("task_deleted", title=html.escape(task.title)), _back_keyboard(tr))


@authorized_only
@with_user
async def _handle_language_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    users: UserService = context.bot_data["users"]
    code = _callback_arg(update)
    users.set_language(user.id, code)
    new_tr = get_translator(code)
    await _reply(
        update,
        new_tr.t("language_changed", language=LANGUAGE_NAMES[code]),
        _back_keyboard(new_tr),
    )


@authorized_only
@with_user
async def _handle_menu_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User, tr: Translator) -> None:
    tasks, reminders = _services(context)
    name = _callback_arg(update)

    if name == "tasks":
        text, markup = render_tasks(tasks.list(user.id), tr, utcnow())
        if markup is None:
            markup = _back_keyboard(tr)
        else:
            markup = InlineKeyboardMarkup(
                list(markup.inline_keyboard) + list(_back_keyboard(tr).inline_keyboard)
            )
        await _reply(update, text, markup)
    elif name == "stats":
        await _reply(update, render_stats(tasks.stats(user.id), tr), _back_keyboard(tr))
    elif name == "reminders":
        text = render_reminders(reminders.list_for_user(user.id), user, tr)
        await _reply(update, text, _back_keyboard(tr))
    elif name == "settings":
        await _reply(update, render_settings(user, tr), _language_keyboard())
    elif name == "serverstats":
        stats = await asyncio.to_thread(collect_server_stats)
        await _reply(update, render_server_stats(stats, tr), _server_stats_keyboard(tr))
    elif name == "help":
        await _reply(update, tr.t("help"), _back_keyboard(tr))
    else:
        await _reply(update, render_main_menu(tasks.stats(user.id), tr), _menu_keyboard(tr))


# ---------------------------------------------------------------------------
# Errors and lifecycle
# ---------------------------------------------------------------------------


async def _on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log unexpected handler failures and tell the user once, without retrying."""
    logger.error("Unhandled error while processing update", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message is not None:
        tr = get_translator(settings.DEFAULT_LANGUAGE)
        await update.effective_message.reply_text(tr.t("error_generic"))


async def _on_shutdown(app: Application) -> None:
    """Wait for an in-flight reminder sweep, then release the database."""
    scheduler: ReminderScheduler | None = app.bot_data.get("scheduler")
    if scheduler is not None:
        await scheduler.shutdown()
    db: TodoDB | None = app.bot_data.get("db")
    if db is not None:
        db.close()
    logger.info("Todo bot shut down")


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def command_table() -> dict[str, Handler]:
    """Command name -> handler. Registered once by build_app."""
    return {
        "start": cmd_start,
        "help": cmd_help,
        "add": cmd_add,
        "list": cmd_list,
        "complete": cmd_complete,
        "delete": cmd_delete,
        "remind": cmd_remind,
        "snooze": cmd_snooze,
        "reminders": cmd_reminders,
        "stats": cmd_stats,
        "settings": cmd_settings,
        "language": cmd_language,
        "serverstats": cmd_serverstats,
    }


def build_app(
    db: TodoDB | None = None,
    notifier: NotificationPort | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        db: Storage gateway. Defaults to TodoDB at settings.DATABASE_PATH.
        notifier: Notification port implementation. Defaults to TelegramNotifier
                  (created from the bot instance after app is built).
    """
    from todobot.core.dispatcher import NotificationDispatcher
    from todobot.core.reminder_scheduler import ReminderScheduler
    from todobot.core.reminder_service import ReminderService
    from todobot.core.task_service import TaskService
    from todobot.core.user_service import UserService

    app = (
        ApplicationBuilder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .post_shutdown(_on_shutdown)
        .build()
    )

    if db is None:
        from todobot.data.db import TodoDB
        db = TodoDB()

    if notifier is None:
        from todobot.adapters.telegram_notifier import TelegramNotifier
        notifier = TelegramNotifier(app.bot)

    tasks = TaskService(db)
    dispatcher = NotificationDispatcher(
        notifier, get_translator, send_timeout=settings.SEND_TIMEOUT_SECONDS,
    )
    scheduler = ReminderScheduler(
        db,
        dispatcher,
        interval_seconds=settings.REMINDER_CHECK_INTERVAL_SECONDS,
        io_timeout_seconds=settings.IO_TIMEOUT_SECONDS,
    )

    # Services in bot_data for handler access
    app.bot_data["db"] = db
    app.bot_data["tasks"] = tasks
    app.bot_data["reminders"] = ReminderService(db, tasks)
    app.bot_data["users"] = UserService(
        db,
        default_timezone=settings.DEFAULT_TIMEZONE,
        default_language=settings.DEFAULT_LANGUAGE,
    )
    app.bot_data["scheduler"] = scheduler

    for name, handler in command_table().items():
        app.add_handler(CommandHandler(name, handler))

    app.add_handler(CallbackQueryHandler(_handle_complete_callback, pattern=r"^complete:"))
    app.add_handler(CallbackQueryHandler(_handle_delete_callback, pattern=r"^delete:"))
    app.add_handler(CallbackQueryHandler(_handle_language_callback, pattern=r"^lang:(en|th)$"))
    app.add_handler(CallbackQueryHandler(_handle_menu_callback, pattern=r"^menu:"))

    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))
    app.add_handler(MessageHandler(filters.COMMAND, cmd_unknown))
    app.add_error_handler(_on_error)

    _setup_reminder_checker(app, scheduler)

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def _setup_reminder_checker(app: Application, scheduler: ReminderScheduler) -> None:
    """Register the repeating reminder sweep on the JobQueue."""

    async def _reminder_job_callback(context: ContextTypes.DEFAULT_TYPE) -> None:
        await scheduler.tick()

    app.job_queue.run_repeating(
        _reminder_job_callback,
        interval=scheduler.interval_seconds,
        first=scheduler.interval_seconds,
        name="reminder_checker",
    )

    logger.info("Reminder checker scheduled every %.0fs", scheduler.interval_seconds)


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Todo Reminder bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
