"""Tests for src.core.scheduler — reminder queueing and delivery.

Uses a mocked job queue and notifier; no Telegram dependency.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.directives import SetReminder
from src.core.scheduler import format_reminder, schedule_reminder, send_reminder

IST = timezone(timedelta(hours=5, minutes=30))
NOW = datetime(2024, 1, 1, 10, 0, 0, tzinfo=IST)


def _schedule(job_queue, notifier, iso, task="call mom"):
    return schedule_reminder(
        job_queue,
        notifier,
        chat_id=42,
        reminder=SetReminder(datetime=iso),
        task=task,
        tz=IST,
        now=NOW,
        assistant_name="Jarvis",
    )


class TestFormatReminder:
    def test_default_name(self):
        assert format_reminder("call mom") == "MPA Reminder: call mom"

    def test_custom_name(self):
        assert format_reminder("stretch", "Jarvis") == "Jarvis Reminder: stretch"


class TestSendReminder:
    @pytest.mark.asyncio
    async def test_sends_formatted_text(self):
        notifier = MagicMock()
        notifier.send_message = AsyncMock()

        await send_reminder(notifier, 42, "call mom", "Jarvis")

        notifier.send_message.assert_awaited_once_with(42, "Jarvis Reminder: call mom")

    @pytest.mark.asyncio
    async def test_delivery_failure_is_logged_not_raised(self, caplog):
        notifier = MagicMock()
        notifier.send_message = AsyncMock(side_effect=RuntimeError("network down"))

        await send_reminder(notifier, 42, "call mom")

        assert "network down" in caplog.text


class TestScheduleReminder:
    def test_future_reminder_is_queued(self):
        job_queue = MagicMock()
        notifier = MagicMock()

        due = _schedule(job_queue, notifier, "2024-01-02T09:00:00")

        assert due == datetime(2024, 1, 2, 9, 0, tzinfo=IST)
        job_queue.run_once.assert_called_once()
        kwargs = job_queue.run_once.call_args.kwargs
        assert kwargs["when"] == due
        assert kwargs["name"].startswith("reminder:42:")

    def test_past_reminder_is_skipped(self):
        job_queue = MagicMock()
        assert _schedule(job_queue, MagicMock(), "2024-01-01T09:00:00") is None
        job_queue.run_once.assert_not_called()

    def test_reminder_at_now_is_skipped(self):
        job_queue = MagicMock()
        assert _schedule(job_queue, MagicMock(), "2024-01-01T10:00:00") is None

    def test_unparseable_time_is_skipped(self):
        job_queue = MagicMock()
        assert _schedule(job_queue, MagicMock(), "next monday") is None
        job_queue.run_once.assert_not_called()

    @pytest.mark.asyncio
    async def test_queued_job_delivers_reminder(self):
        job_queue = MagicMock()
        notifier = MagicMock()
        notifier.send_message = AsyncMock()

        _schedule(job_queue, notifier, "2024-01-02T09:00:00", task="water plants")
        callback = job_queue.run_once.call_args.args[0]
        await callback(MagicMock())

        notifier.send_message.assert_awaited_once_with(42, "Jarvis Reminder: water plants")
