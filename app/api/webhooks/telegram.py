# app/api/webhooks/telegram.py
"""
Telegram webhook.

Telegram POSTs every update of the bot here. The owner writes
free-text messages ("set hours Mon–Fri 09:00-18:00") and the command
service turns them into changes of the shop-info document.

Two URLs, same handler:
- POST /api/telegram?secret=<secret>
- POST /telegram-webhook/<secret>
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict
import structlog

from app.api.auth import is_authorized

logger = structlog.get_logger()
router = APIRouter(tags=["telegram"])


# ==========================================
# DATA MODEL: Telegram update
# ==========================================

class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: Optional[str] = None
    chat: Optional[TelegramChat] = None


class TelegramUpdate(BaseModel):
    """Only the fields we use; everything else Telegram sends is ignored."""

    model_config = ConfigDict(extra="allow")

    message: Optional[TelegramMessage] = None


# ==========================================
# ENDPOINTS
# ==========================================

@router.post("/api/telegram")
async def telegram_webhook(request: Request, secret: Optional[str] = None):
    return await process_update(request, secret)


@router.post("/telegram-webhook/{secret}")
async def telegram_webhook_by_path(request: Request, secret: str):
    return await process_update(request, secret)


async def process_update(request: Request, secret: Optional[str]) -> dict:
    """
    Flow:
    1. ✅ Check the shared secret (401 otherwise, nothing else happens)
    2. Parse the update, ignore anything without text
    3. Check the chat against ADMIN_CHAT_IDS (403 otherwise)
    4. Hand the text to the command service
    5. Always acknowledge: processing errors are only logged
    """
    state = request.app.state

    if not is_authorized(state.settings, secret):
        logger.warning(
            "webhook_unauthorized",
            remote_ip=request.client.host if request.client else "unknown"
        )
        raise HTTPException(401, "Unauthorized")

    try:
        update = TelegramUpdate.model_validate(await request.json())
    except ValueError as e:
        logger.warning("webhook_bad_payload", error=str(e))
        return {"ok": True}

    message = update.message
    text = (message.text or "").strip() if message else ""
    if not text or message.chat is None:
        return {"ok": True}

    chat_id = message.chat.id
    allowlist = state.settings.admin_allowlist
    if allowlist and chat_id not in allowlist:
        logger.warning("webhook_chat_not_allowed", chat_id=chat_id)
        raise HTTPException(403, "Forbidden")

    logger.info("message_received", chat_id=chat_id, text=text[:50])

    try:
        await state.commands.handle(chat_id, text)
    except Exception as e:
        logger.error(
            "webhook_processing_failed",
            chat_id=chat_id,
            error=str(e),
            error_type=type(e).__name__
        )

    return {"ok": True}
