"""
MPA Assistant — Telegram Bot.

Telegram is the chat surface of the assistant: every utterance flows
through Assistant.process_message, the embedded directives become follow-up
messages (with links where there is something to open), and reminders are
queued on the bot's job queue.

The assistant answers only its registered owner; everyone else gets the
fixed apology from the access gate.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine
from zoneinfo import ZoneInfo

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)
from telegram.helpers import escape_markdown

from src.config import settings
from src.core.action_service import build_notices
from src.core.assistant import Assistant
from src.core.directives import SetReminder
from src.core.extractors import extract_reminder
from src.core.scheduler import schedule_reminder
from src.data.models import GENDERS, LANGUAGES, REGISTERED_USER_ID_KEY

if TYPE_CHECKING:
    from src.data.db import ProfileDB
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

_OWNER_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
_MIN_NAME, _MAX_NAME = 2, 50

ASK_REMINDER_CLOCK = (
    "I couldn't schedule that reminder. "
    "Please tell me a clock time, e.g. 'remind me to call mom at 5pm'."
)


def _now() -> datetime:
    """Current time in the configured timezone (aware)."""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def _local_clock() -> datetime:
    """Naive local wall clock for the assistant core."""
    return _now().replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Caller identity & owner gate
# ---------------------------------------------------------------------------


def _caller_identity(update: Update, context: ContextTypes.DEFAULT_TYPE) -> str | None:
    """Map a Telegram account to the identity the access gate compares.

    The owner's account maps to the registered owner name; any other
    account maps to ``tg:<user id>``, which can never equal a valid name.
    """
    user = update.effective_user
    if user is None:
        return None

    assistant: Assistant = context.bot_data["assistant"]
    profile_db: ProfileDB = context.bot_data["profile_db"]
    owner_id = profile_db.get_item(REGISTERED_USER_ID_KEY)
    if owner_id and owner_id == str(user.id):
        return assistant.get_registered_user()
    return f"tg:{user.id}"


def owner_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that answers non-owners with the access-gate apology."""

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        assistant: Assistant = context.bot_data["assistant"]
        caller = _caller_identity(update, context)
        if not assistant.is_authorized(caller):
            logger.warning("Unauthorized command from %s", caller)
            await update.message.reply_text(assistant.unauthorized_response())
            return ConversationHandler.END
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Message pipeline: utterance → reply → action notices → reminders
# ---------------------------------------------------------------------------


async def _process_text(
    text: str, update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Run one utterance through the assistant and deliver the results."""
    assistant: Assistant = context.bot_data["assistant"]
    caller = _caller_identity(update, context)

    try:
        response = assistant.process_message(text, caller)
        actions = assistant.parse_action_codes(response)
        cleaned = assistant.clean_response(response)
    except Exception as exc:
        logger.error("Assistant error: %s", exc)
        await update.message.reply_text(
            "Sorry, something went wrong while handling your message. Please try again."
        )
        return

    await update.message.reply_text(cleaned)

    for action, notice in zip(actions, build_notices(actions)):
        if isinstance(action, SetReminder):
            if _queue_reminder(action, text, update, context) is None:
                await update.message.reply_text(ASK_REMINDER_CLOCK)
                continue

        markup = None
        if notice.link:
            markup = InlineKeyboardMarkup(
                [[InlineKeyboardButton("📱 Open Link", url=notice.link)]]
            )
        await update.message.reply_text(f"✓ {notice.text}", reply_markup=markup)


def _queue_reminder(
    reminder: SetReminder, text: str, update: Update, context: ContextTypes.DEFAULT_TYPE,
) -> datetime | None:
    """Queue the reminder; returns its due time, or None if it was not queued."""
    assistant: Assistant = context.bot_data["assistant"]
    notifier: NotificationPort = context.bot_data["notifier"]
    task = extract_reminder(text).task or text
    return schedule_reminder(
        context.job_queue,
        notifier,
        update.effective_chat.id,
        reminder,
        task,
        tz=ZoneInfo(settings.TIMEZONE),
        now=_now(),
        assistant_name=assistant.user_name,
    )


# ---------------------------------------------------------------------------
# Owner registration
# ---------------------------------------------------------------------------


def _validate_owner_name(name: str) -> str | None:
    """Return an error message for an invalid owner name, or None if valid."""
    if not (_MIN_NAME <= len(name) <= _MAX_NAME):
        return f"Name must be between {_MIN_NAME} and {_MAX_NAME} characters."
    if not _OWNER_NAME_RE.match(name):
        return "Name can only contain letters, spaces, hyphens, and apostrophes."
    return None


async def cmd_register(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /register <name> — lock the assistant to the sender."""
    assistant: Assistant = context.bot_data["assistant"]
    profile_db: ProfileDB = context.bot_data["profile_db"]

    if assistant.get_registered_user() and not assistant.is_authorized(
        _caller_identity(update, context)
    ):
        await update.message.reply_text(assistant.unauthorized_response())
        return

    name = " ".join(context.args or []).strip()
    if not name:
        await update.message.reply_text("Usage: /register <your name>")
        return

    error = _validate_owner_name(name)
    if error:
        await update.message.reply_text(error)
        return

    assistant.set_registered_user(name)
    profile_db.set_item(REGISTERED_USER_ID_KEY, str(update.effective_user.id))
    logger.info("Owner registered: %s (telegram id %d)", name, update.effective_user.id)
    await update.message.reply_text(
        f"Welcome, {name}! I'm {assistant.user_name}, your personal assistant. "
        "How may I be of service?"
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — greeting, or registration prompt for a fresh assistant."""
    assistant: Assistant = context.bot_data["assistant"]

    if not assistant.get_registered_user():
        await update.message.reply_text(
            f"Welcome to *{escape_markdown(assistant.user_name)}*, your Personal Digital Butler.\n\n"
            "Please register your name with /register <name>. "
            "I will respond only to you.",
            parse_mode="Markdown",
        )
        return

    if not assistant.is_authorized(_caller_identity(update, context)):
        await update.message.reply_text(assistant.unauthorized_response())
        return

    await update.message.reply_text(
        f"Good day! I'm {assistant.user_name}, your personal assistant. "
        "How may I be of service?"
    )


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/register <name> — Register yourself as my owner\n"
        "/settings — Change my name, gender and language\n"
        "/joke — Tell me a joke\n"
        "/quote — Give me a quote\n"
        "/help — Show this message\n\n"
        "Or just write, e.g. 'Remind me to call the dentist tomorrow at 10 AM'.",
        parse_mode="Markdown",
    )


@owner_only
async def cmd_joke(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Quick action: same as sending 'Tell me a joke'."""
    await _process_text("Tell me a joke", update, context)


@owner_only
async def cmd_quote(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Quick action: same as sending 'Give me a quote'."""
    await _process_text("Give me a quote", update, context)


# ---------------------------------------------------------------------------
# /settings conversation
# ---------------------------------------------------------------------------

SETTINGS_NAME, SETTINGS_GENDER, SETTINGS_LANGUAGE = range(3)

_SETTINGS_KEYS = ("settings_name", "settings_gender")


def _clear_settings_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for key in _SETTINGS_KEYS:
        context.user_data.pop(key, None)


@owner_only
async def cmd_settings(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point for /settings — ask for the assistant's name."""
    assistant: Assistant = context.bot_data["assistant"]
    await update.message.reply_text(
        f"What should I be called? (currently *{escape_markdown(assistant.user_name)}*)\n"
        "Send /cancel to abort.",
        parse_mode="Markdown",
    )
    return SETTINGS_NAME


async def settings_name(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    name = update.message.text.strip()
    if not name or len(name) > _MAX_NAME:
        await update.message.reply_text(
            f"Please send a name of 1 to {_MAX_NAME} characters."
        )
        return SETTINGS_NAME

    context.user_data["settings_name"] = name
    await update.message.reply_text(
        "Which gender should I use?",
        reply_markup=ReplyKeyboardMarkup([list(GENDERS)], one_time_keyboard=True),
    )
    return SETTINGS_GENDER


async def settings_gender(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    gender = update.message.text.strip().lower()
    if gender not in GENDERS:
        await update.message.reply_text(f"Please choose one of: {', '.join(GENDERS)}.")
        return SETTINGS_GENDER

    context.user_data["settings_gender"] = gender
    codes = list(LANGUAGES)
    keyboard = [codes[i:i + 5] for i in range(0, len(codes), 5)]
    await update.message.reply_text(
        "Preferred language?\n"
        + "\n".join(f"{code} — {label}" for code, label in LANGUAGES.items()),
        reply_markup=ReplyKeyboardMarkup(keyboard, one_time_keyboard=True),
    )
    return SETTINGS_LANGUAGE


async def settings_language(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    language = update.message.text.strip().lower()
    if language not in LANGUAGES:
        await update.message.reply_text("Please pick one of the listed language codes.")
        return SETTINGS_LANGUAGE

    assistant: Assistant = context.bot_data["assistant"]
    name = context.user_data["settings_name"]
    gender = context.user_data["settings_gender"]

    assistant.set_user_name(name)
    assistant.set_gender(gender)
    assistant.set_language(language)
    _clear_settings_data(context)

    await update.message.reply_text(
        f"Settings saved! I'm now {name} ({gender} assistant, {language} language).",
        reply_markup=ReplyKeyboardRemove(),
    )
    return ConversationHandler.END


async def settings_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    _clear_settings_data(context)
    await update.message.reply_text(
        "Settings unchanged.", reply_markup=ReplyKeyboardRemove(),
    )
    return ConversationHandler.END


# ---------------------------------------------------------------------------
# Message handlers
# ---------------------------------------------------------------------------


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages — the access gate runs inside the assistant."""
    await _process_text(update.message.text, update, context)


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------


def build_app(
    profile_db: ProfileDB | None = None,
    notifier: NotificationPort | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        profile_db: Profile store. Defaults to ProfileDB at DATABASE_PATH.
        notifier: Notification port for reminders. Defaults to TelegramNotifier
                  (created from the bot instance after app is built).
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if profile_db is None:
        from src.data.db import ProfileDB
        profile_db = ProfileDB()

    if notifier is None:
        from src.adapters.telegram_notifier import TelegramNotifier
        notifier = TelegramNotifier(app.bot)

    app.bot_data["profile_db"] = profile_db
    app.bot_data["notifier"] = notifier
    app.bot_data["assistant"] = Assistant(store=profile_db, clock=_local_clock)

    # Commands
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("register", cmd_register))
    app.add_handler(CommandHandler("joke", cmd_joke))
    app.add_handler(CommandHandler("quote", cmd_quote))

    # /settings conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    settings_conv = ConversationHandler(
        entry_points=[CommandHandler("settings", cmd_settings)],
        states={
            SETTINGS_NAME: [MessageHandler(_text, settings_name)],
            SETTINGS_GENDER: [MessageHandler(_text, settings_gender)],
            SETTINGS_LANGUAGE: [MessageHandler(_text, settings_language)],
        },
        fallbacks=[CommandHandler("cancel", settings_cancel)],
    )
    app.add_handler(settings_conv)

    # Text messages (non-command)
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting MPA Assistant bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
