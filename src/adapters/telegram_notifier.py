"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance so reminder delivery can push a message
to the owner's chat without knowing about Telegram.
"""

from __future__ import annotations

import logging

from telegram import Bot

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_message(self, chat_id: int, text: str) -> None:
        logger.debug("Sending notification to chat %d", chat_id)
        await self._bot.send_message(chat_id=chat_id, text=text)
