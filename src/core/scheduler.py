"""
MPA Assistant — Reminder Delivery.

A SET_REMINDER directive becomes a one-shot job on the host's job queue;
when it fires, the reminder text is pushed to the owner's chat.

This module is provider-agnostic: it depends on the NotificationPort
protocol and on a job queue exposing ``run_once``, not on Telegram.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.core.directives import SetReminder
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)


def format_reminder(task: str, assistant_name: str = "MPA") -> str:
    return f"{assistant_name} Reminder: {task}"


async def send_reminder(
    notifier: NotificationPort,
    chat_id: int,
    task: str,
    assistant_name: str = "MPA",
) -> None:
    """Deliver one reminder. Delivery failures are logged, not raised."""
    try:
        await notifier.send_message(chat_id, format_reminder(task, assistant_name))
        logger.info("Reminder delivered to chat %d", chat_id)
    except Exception as exc:
        logger.error("Failed to deliver reminder to %d: %s", chat_id, exc)


def schedule_reminder(
    job_queue: Any,
    notifier: NotificationPort,
    chat_id: int,
    reminder: SetReminder,
    task: str,
    tz: tzinfo,
    now: datetime,
    assistant_name: str = "MPA",
) -> datetime | None:
    """Queue a reminder for delivery at its resolved time.

    Args:
        job_queue: Anything with a telegram-style ``run_once(callback, when, name=...)``.
        reminder: The parsed directive; its naive datetime is read in ``tz``.
        task: Text to send back when the reminder fires.
        now: Current time (timezone-aware) used to drop past reminders.

    Returns:
        The aware due time, or None if the reminder was not scheduled.
    """
    try:
        due = datetime.fromisoformat(reminder.datetime)
    except ValueError:
        logger.warning("Unparseable reminder time %r, not scheduling", reminder.datetime)
        return None

    if due.tzinfo is None:
        due = due.replace(tzinfo=tz)

    if due <= now:
        logger.info("Reminder time %s is not in the future, skipping", due.isoformat())
        return None

    async def _reminder_job(context: Any) -> None:
        await send_reminder(notifier, chat_id, task, assistant_name)

    job_queue.run_once(_reminder_job, when=due, name=f"reminder:{chat_id}:{due.isoformat()}")
    logger.info("Reminder for chat %d scheduled at %s", chat_id, due.isoformat())
    return due
