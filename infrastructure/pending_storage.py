# infrastructure/pending_storage.py
"""
⏳ PENDING CONFIRMATIONS

When AUTO_APPLY is off, a parsed command is not applied right away:
the bot shows a preview and waits for "yes" / "no" from the same chat.
The waiting command lives here, in aiogram's FSM storage.

- REDIS_URL set → RedisStorage (survives restarts and serverless cold starts)
- otherwise → MemoryStorage (lost on restart, fine for local runs)
"""

from typing import Any, Optional

from aiogram.fsm.storage.base import BaseStorage, StorageKey
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from redis.asyncio.client import Redis
import structlog

from config.settings import Settings

logger = structlog.get_logger()


def build_storage(settings: Settings) -> BaseStorage:
    """Redis if configured, else memory."""
    if settings.redis_url:
        redis = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True
        )
        logger.info("pending_storage_redis")
        return RedisStorage(redis=redis)

    logger.info("pending_storage_memory")
    return MemoryStorage()


def bot_id_from_token(token: str) -> int:
    """Telegram tokens look like "<bot id>:<secret>"."""
    prefix = token.split(":", 1)[0]
    return int(prefix) if prefix.isdigit() else 0


class PendingIntents:
    """One waiting command per chat."""

    def __init__(self, storage: BaseStorage, bot_id: int = 0):
        self.storage = storage
        self.bot_id = bot_id

    def _key(self, chat_id: int) -> StorageKey:
        return StorageKey(bot_id=self.bot_id, chat_id=chat_id, user_id=chat_id)

    async def get(self, chat_id: int) -> Optional[dict[str, Any]]:
        data = await self.storage.get_data(self._key(chat_id))
        return data.get("pending")

    async def put(self, chat_id: int, intent: dict[str, Any]) -> None:
        await self.storage.set_data(self._key(chat_id), {"pending": intent})
        logger.info("pending_intent_saved", chat_id=chat_id, type=intent.get("type"))

    async def clear(self, chat_id: int) -> None:
        await self.storage.set_data(self._key(chat_id), {})

    async def close(self) -> None:
        await self.storage.close()
