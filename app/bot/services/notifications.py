# app/bot/services/notifications.py
"""
Service for sending replies to the owner's chat.
"""

from typing import Optional

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.types import LinkPreviewOptions
import structlog

logger = structlog.get_logger()


class ChatNotifier:
    """
    Sends HTML messages through the Telegram Bot API.

    Without a bot token every send is a no-op.
    """

    def __init__(self, bot_token: str, bot: Optional[Bot] = None):
        self.bot_token = bot_token
        self._bot = bot

    @property
    def bot(self) -> Optional[Bot]:
        if self._bot is None and self.bot_token:
            self._bot = Bot(
                token=self.bot_token,
                default=DefaultBotProperties(parse_mode="HTML")
            )
        return self._bot

    async def send(self, chat_id: int, text: str) -> bool:
        """Sends a message; failures are logged, never raised."""
        if self.bot is None:
            logger.info("chat_message_skipped", chat_id=chat_id, reason="BOT_TOKEN not set")
            return False

        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
            logger.info("chat_message_sent", chat_id=chat_id)
            return True
        except Exception as e:
            logger.error("chat_message_failed", chat_id=chat_id, error=str(e))
            return False

    async def close(self) -> None:
        if self._bot is not None:
            await self._bot.session.close()
